# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/routes/webhooks.py

Endpoints del webhook de pagos y del ledger.

Endpoints:
- POST /webhook          → recibe la notificación de la pasarela (siempre 200)
- POST /webhook/retry    → dispara el sweep de reintentos
- GET  /webhook/logs     → entradas del ledger para operación

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.config import settings
from schoolpay.shared.database.database import get_async_session
from schoolpay.modules.payments.container import (
    build_ledger_service,
    build_webhook_handler,
    get_retry_service,
)
from schoolpay.modules.payments.enums import LedgerStatus
from schoolpay.modules.payments.facades.webhooks.handler import WebhookHandler
from schoolpay.modules.payments.schemas import (
    RetrySweepResponse,
    WebhookLogEntry,
    WebhookLogsResponse,
    WebhookResponse,
)
from schoolpay.modules.payments.services import WebhookLedgerService, WebhookRetryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["payments:webhooks"])


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=WebhookResponse,
)
async def receive_webhook(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    handler: WebhookHandler = Depends(build_webhook_handler),
) -> WebhookResponse:
    """
    Webhook de la pasarela de pagos.

    Responde 200 incluso ante payloads inválidos: el resultado va en
    `success` y el detalle queda en el ledger.
    """
    raw_body = await request.body()
    return await handler.handle(
        session,
        raw_body=raw_body,
        headers=dict(request.headers),
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


@router.post("/retry", response_model=RetrySweepResponse)
async def retry_failed_webhooks(
    retry_service: WebhookRetryService = Depends(get_retry_service),
) -> RetrySweepResponse:
    result = await retry_service.retry_failed_webhooks()
    return RetrySweepResponse.model_validate(result)


@router.get(
    "/logs",
    response_model=WebhookLogsResponse,
    response_model_exclude_none=True,
)
async def list_webhook_logs(
    status_filter: Optional[LedgerStatus] = Query(default=None, alias="status"),
    event_type: Optional[str] = Query(default=None, max_length=128),
    order_id: Optional[UUID] = Query(default=None),
    created_from: Optional[datetime] = Query(default=None, description="Creadas desde (ISO 8601, inclusivo)"),
    created_to: Optional[datetime] = Query(default=None, description="Creadas hasta (ISO 8601, inclusivo)"),
    exhausted: bool = Query(default=False, description="Solo entradas que agotaron reintentos"),
    limit: int = Query(default=50, ge=1),
    session: AsyncSession = Depends(get_async_session),
    ledger_service: WebhookLedgerService = Depends(build_ledger_service),
) -> WebhookLogsResponse:
    limit = min(limit, settings.webhook_logs_max_limit)
    entries = await ledger_service.ledger_repo.list_entries(
        session,
        status=status_filter,
        event_type=event_type,
        order_id=order_id,
        created_from=created_from,
        created_to=created_to,
        exhausted_only=exhausted,
        max_retries=ledger_service.max_retries,
        limit=limit,
    )
    items = [WebhookLogEntry.model_validate(entry) for entry in entries]
    return WebhookLogsResponse(count=len(items), items=items)

# Fin del archivo backend/schoolpay/modules/payments/routes/webhooks.py
