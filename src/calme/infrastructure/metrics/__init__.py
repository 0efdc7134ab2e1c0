"""Metrics infrastructure."""

from calme.infrastructure.metrics.prometheus_metrics import ConversationMetrics

__all__ = ["ConversationMetrics"]
