# backend/tests/modules/payments/metrics/test_prometheus_exporter.py
# -*- coding: utf-8 -*-
"""
Exporter Prometheus del módulo de pagos (registry propio).
"""

from schoolpay.modules.payments.metrics.exporters import (
    observe_retry_result,
    observe_status_query,
    observe_webhook_outcome,
    observe_webhook_received,
    prometheus_ping,
    render_prometheus_metrics,
)
from schoolpay.modules.payments.metrics.exporters.prometheus_exporter import registry


def _sample(name, labels):
    return registry.get_sample_value(name, labels) or 0.0


def test_counters_increment_per_label():
    before = _sample("schoolpay_webhook_received_total", {"event_type": "METRICS_TEST"})
    observe_webhook_received("METRICS_TEST")
    observe_webhook_received("METRICS_TEST")
    assert _sample("schoolpay_webhook_received_total", {"event_type": "METRICS_TEST"}) == before + 2

    before = _sample("schoolpay_webhook_retry_results_total", {"result": "exhausted"})
    observe_retry_result("exhausted")
    assert _sample("schoolpay_webhook_retry_results_total", {"result": "exhausted"}) == before + 1

    before = _sample("schoolpay_status_queries_total", {"source": "gateway"})
    observe_status_query("gateway")
    assert _sample("schoolpay_status_queries_total", {"source": "gateway"}) == before + 1


def test_outcome_feeds_counter_and_histogram():
    count_before = _sample("schoolpay_webhook_processing_seconds_count", {"outcome": "unchanged"})
    total_before = _sample("schoolpay_webhook_outcome_total", {"outcome": "unchanged"})

    observe_webhook_outcome("unchanged", 0.25)

    assert _sample("schoolpay_webhook_processing_seconds_count", {"outcome": "unchanged"}) == count_before + 1
    assert _sample("schoolpay_webhook_outcome_total", {"outcome": "unchanged"}) == total_before + 1


def test_render_and_ping():
    observe_webhook_received("RENDER_TEST")
    output = render_prometheus_metrics()

    assert isinstance(output, bytes)
    assert b"schoolpay_webhook_received_total" in output

    ping = prometheus_ping()
    assert ping["status"] == "ok"
    assert ping["service"] == "schoolpay-payments-metrics"

# Fin del archivo backend/tests/modules/payments/metrics/test_prometheus_exporter.py
