# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/container.py

Construcción explícita de los servicios del módulo Payments.

Cada colaborador se pasa por constructor; las rutas obtienen los
servicios con Depends(...) sobre estas funciones y los tests las
reemplazan con app.dependency_overrides.

El servicio de reintentos y el cliente de la pasarela son singletons de
proceso: el primero porque su asyncio.Lock serializa los sweeps, el
segundo para reutilizar conexiones.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

from schoolpay.shared.config import settings
from schoolpay.modules.orders.repositories import OrderRepository
from schoolpay.modules.orders.services import IdentifierResolver
from schoolpay.modules.payments.facades.reconciliation.core import ReconciliationEngine
from schoolpay.modules.payments.facades.status import GatewayStatusClient, StatusQueryService
from schoolpay.modules.payments.facades.webhooks.handler import WebhookHandler
from schoolpay.modules.payments.repositories import PaymentRecordRepository, WebhookLedgerRepository
from schoolpay.modules.payments.services import WebhookLedgerService, WebhookRetryService

logger = logging.getLogger(__name__)

_retry_service: Optional[WebhookRetryService] = None
_gateway_client: Optional[GatewayStatusClient] = None


def build_reconciliation_engine() -> ReconciliationEngine:
    return ReconciliationEngine(
        resolver=IdentifierResolver(),
        record_repo=PaymentRecordRepository(),
        order_repo=OrderRepository(),
    )


def build_ledger_service() -> WebhookLedgerService:
    return WebhookLedgerService(
        WebhookLedgerRepository(),
        max_retries=settings.webhook_max_retries,
        base_delay_seconds=settings.webhook_retry_base_delay_seconds,
    )


def build_webhook_handler() -> WebhookHandler:
    return WebhookHandler(
        engine=build_reconciliation_engine(),
        ledger_service=build_ledger_service(),
    )


def get_gateway_client() -> Optional[GatewayStatusClient]:
    """Cliente de consulta en vivo, o None si GATEWAY_STATUS_URL no está configurada."""
    global _gateway_client
    if _gateway_client is None and settings.gateway_status_url:
        api_key = settings.gateway_api_key
        _gateway_client = GatewayStatusClient(
            settings.gateway_status_url,
            api_key=api_key.get_secret_value() if api_key else None,
            timeout_seconds=settings.gateway_status_timeout_seconds,
        )
    return _gateway_client


def build_status_query_service() -> StatusQueryService:
    return StatusQueryService(
        resolver=IdentifierResolver(),
        record_repo=PaymentRecordRepository(),
        gateway_client=get_gateway_client(),
        retry_after_seconds=settings.status_retry_after_seconds,
    )


def get_retry_service() -> WebhookRetryService:
    """Instancia única por proceso (compartida por la ruta y el job programado)."""
    global _retry_service
    if _retry_service is None:
        from schoolpay.shared.database.database import SessionLocal

        ledger_service = build_ledger_service()
        _retry_service = WebhookRetryService(
            SessionLocal,
            ledger_repo=ledger_service.ledger_repo,
            ledger_service=ledger_service,
            engine=build_reconciliation_engine(),
            attempt_timeout_seconds=settings.webhook_retry_attempt_timeout_seconds,
            batch_size=settings.webhook_retry_batch_size,
        )
    return _retry_service


async def close_payment_clients() -> None:
    """Cierra el cliente HTTP de la pasarela; registrar en el shutdown del lifespan."""
    global _gateway_client
    if _gateway_client is not None:
        await _gateway_client.aclose()
        _gateway_client = None
        logger.info("Cliente HTTP de la pasarela cerrado")


__all__ = [
    "build_reconciliation_engine",
    "build_ledger_service",
    "build_webhook_handler",
    "build_status_query_service",
    "get_gateway_client",
    "get_retry_service",
    "close_payment_clients",
]

# Fin del archivo backend/schoolpay/modules/payments/container.py
