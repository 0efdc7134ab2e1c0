"""CALMe services: classification, dialogue and orchestration."""
