# -*- coding: utf-8 -*-
from .prometheus_exporter import (
    registry,
    render_prometheus_metrics,
    observe_webhook_received,
    observe_webhook_outcome,
    observe_retry_result,
    observe_status_query,
    prometheus_ping,
)

__all__ = [
    "registry",
    "render_prometheus_metrics",
    "observe_webhook_received",
    "observe_webhook_outcome",
    "observe_retry_result",
    "observe_status_query",
    "prometheus_ping",
]
