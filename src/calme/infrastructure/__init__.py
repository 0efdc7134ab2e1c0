"""Infrastructure adapters: metrics and profile storage."""
