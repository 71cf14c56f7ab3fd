# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/metrics/exporters/prometheus_exporter.py

Exporter Prometheus para el módulo de pagos.
Registro propio (no el REGISTRY global) para que los tests puedan importar
el módulo varias veces sin colisiones de nombres.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Registro de Prometheus del módulo
# --------------------------------------------------------------------------
registry = CollectorRegistry()

# --------------------------------------------------------------------------
# Definición de métricas
# --------------------------------------------------------------------------
WEBHOOKS_RECEIVED_TOTAL = Counter(
    "schoolpay_webhook_received_total",
    "Total webhooks recibidos por tipo de evento",
    ["event_type"],
    registry=registry,
)
WEBHOOKS_OUTCOME_TOTAL = Counter(
    "schoolpay_webhook_outcome_total",
    "Total webhooks por outcome (processed/order_not_found/unchanged/failed)",
    ["outcome"],
    registry=registry,
)
WEBHOOKS_PROCESSING_SECONDS = Histogram(
    "schoolpay_webhook_processing_seconds",
    "Tiempo de procesamiento de webhooks (segundos)",
    ["outcome"],
    registry=registry,
)
WEBHOOK_RETRY_RESULTS_TOTAL = Counter(
    "schoolpay_webhook_retry_results_total",
    "Resultados de reintentos del ledger (success/rescheduled/exhausted/error)",
    ["result"],
    registry=registry,
)
STATUS_QUERIES_TOTAL = Counter(
    "schoolpay_status_queries_total",
    "Consultas de estado por fuente de la respuesta (local/gateway/none)",
    ["source"],
    registry=registry,
)


# --------------------------------------------------------------------------
# Funciones auxiliares
# --------------------------------------------------------------------------
def render_prometheus_metrics() -> bytes:
    """Genera la salida actual de las métricas en formato Prometheus."""
    return generate_latest(registry)


def observe_webhook_received(event_type: str):
    WEBHOOKS_RECEIVED_TOTAL.labels(event_type=event_type).inc()


def observe_webhook_outcome(outcome: str, duration: float):
    """
    Registra el outcome de un webhook y su duración.

    Args:
        outcome: processed/order_not_found/unchanged/failed
        duration: Tiempo de procesamiento en segundos
    """
    WEBHOOKS_OUTCOME_TOTAL.labels(outcome=outcome).inc()
    WEBHOOKS_PROCESSING_SECONDS.labels(outcome=outcome).observe(duration)
    logger.debug(f"[Prometheus] Webhook outcome={outcome} duration={duration:.4f}s")


def observe_retry_result(result: str):
    WEBHOOK_RETRY_RESULTS_TOTAL.labels(result=result).inc()


def observe_status_query(source: str):
    STATUS_QUERIES_TOTAL.labels(source=source).inc()


# --------------------------------------------------------------------------
# Health-check de Prometheus
# --------------------------------------------------------------------------
def prometheus_ping() -> dict:
    """Devuelve un simple dict para verificar salud del exporter."""
    return {
        "status": "ok",
        "service": "schoolpay-payments-metrics",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "metrics_registered": len(registry._names_to_collectors),
    }

# Fin del archivo backend/schoolpay/modules/payments/metrics/exporters/prometheus_exporter.py
