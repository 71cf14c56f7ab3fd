# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/webhooks/handler.py

Frontera del webhook entrante: ledger → normalización → conciliación → ledger.

Contrato:
- Nunca propaga excepciones al transporte; toda falla se convierte en un
  WebhookResponse con success=False (las pasarelas reintentan ante
  cualquier respuesta no-2xx).
- Forma desconocida o falla de persistencia → entrada failed, reintentable.
- Orden no encontrada → entrada processed, order.status="order_not_found".

Transacciones: cada paso del ledger se confirma por separado para que la
entrada sobreviva aunque la conciliación haga rollback.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.modules.payments.facades.reconciliation.core import (
    ReconcileOutcome,
    ReconcileResult,
    ReconciliationEngine,
)
from schoolpay.modules.payments.metrics.exporters.prometheus_exporter import (
    observe_webhook_outcome,
    observe_webhook_received,
)
from schoolpay.modules.payments.schemas.webhook_schemas import WebhookOrderSummary, WebhookResponse
from schoolpay.modules.payments.services.webhook_ledger_service import WebhookLedgerService
from .normalize import decode_webhook_body, extract_event_type
from .shapes import WebhookNormalizationError

logger = logging.getLogger(__name__)

OUTCOME_PROCESSED = "processed"
OUTCOME_FAILED = "failed"

_SUCCESS_MESSAGES = {
    ReconcileOutcome.UPDATED: "Webhook processed successfully",
    ReconcileOutcome.UNCHANGED: "Webhook processed; payment status already final, left unchanged",
    ReconcileOutcome.ORDER_NOT_FOUND: "Webhook processed but no matching order was found",
}


class WebhookProcessingError(RuntimeError):
    """Falla no relacionada con la forma del payload (persistencia, etc.)."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class WebhookHandler:
    def __init__(self, *, engine: ReconciliationEngine, ledger_service: WebhookLedgerService) -> None:
        self.engine = engine
        self.ledger_service = ledger_service

    async def handle(
        self,
        session: AsyncSession,
        *,
        raw_body: Optional[bytes] = None,
        payload: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> WebhookResponse:
        """
        Procesa un webhook y devuelve siempre un WebhookResponse.

        Args:
            raw_body: Body HTTP crudo (se decodifica como JSON)
            payload: Body ya decodificado; tiene prioridad sobre raw_body
        """
        started = time.perf_counter()
        body = payload if payload is not None else decode_webhook_body(raw_body or b"")
        event_type = extract_event_type(body)
        observe_webhook_received(event_type)

        # 1) Ledger: pending
        try:
            entry = await self.ledger_service.open_entry(
                session,
                payload=body,
                headers=headers,
                ip_address=ip_address,
                user_agent=user_agent,
                event_type=event_type,
            )
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"No se pudo registrar el webhook en el ledger: {e}", exc_info=True)
            observe_webhook_outcome(OUTCOME_FAILED, time.perf_counter() - started)
            return WebhookResponse(
                success=False,
                message=f"Webhook could not be recorded: {e}",
                processing_time=_elapsed_ms(started),
            )

        entry_id = entry.id
        webhook_id = entry.webhook_id

        # 2) processing → normalizar → conciliar → processed
        try:
            await self.ledger_service.mark_processing(session, entry)
            await session.commit()

            event, result = await self.engine.reconcile_payload(session, body, headers)

            response = self._success_response(webhook_id, result, _elapsed_ms(started))
            await self.ledger_service.mark_processed(
                session,
                entry,
                response=response.to_ledger_response(),
                processing_time_ms=response.processing_time,
                order_id=result.order_id,
                external_reference=event.external_reference,
                gateway_status=event.gateway_status,
                normalized_status=response.order.status if response.order else None,
            )
            await session.commit()
        except WebhookNormalizationError as e:
            return await self._fail(session, entry_id, webhook_id, str(e), started)
        except Exception as e:
            error = WebhookProcessingError(f"Webhook processing failed: {e}", cause=e)
            logger.error(f"Webhook {webhook_id}: {error}", exc_info=True)
            return await self._fail(session, entry_id, webhook_id, str(error), started)

        outcome = OUTCOME_PROCESSED if result.outcome == ReconcileOutcome.UPDATED else result.outcome.value
        observe_webhook_outcome(outcome, time.perf_counter() - started)
        return response

    # -----------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------
    @staticmethod
    def _success_response(webhook_id: str, result: ReconcileResult, elapsed_ms: int) -> WebhookResponse:
        return WebhookResponse(
            success=True,
            webhook_id=webhook_id,
            message=_SUCCESS_MESSAGES[result.outcome],
            processing_time=elapsed_ms,
            order=WebhookOrderSummary.model_validate(result.to_order_summary()),
        )

    async def _fail(
        self,
        session: AsyncSession,
        entry_id: int,
        webhook_id: str,
        message: str,
        started: float,
    ) -> WebhookResponse:
        response = WebhookResponse(
            success=False,
            webhook_id=webhook_id,
            message=message,
            processing_time=_elapsed_ms(started),
        )
        try:
            await session.rollback()
            entry = await self.ledger_service.ledger_repo.get(session, entry_id)
            await session.refresh(entry)
            await self.ledger_service.record_failure(
                session,
                entry,
                error=message,
                is_retry=False,
                processing_time_ms=response.processing_time,
                response=response.to_ledger_response(),
            )
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Webhook {webhook_id}: no se pudo registrar la falla en el ledger: {e}", exc_info=True)

        observe_webhook_outcome(OUTCOME_FAILED, time.perf_counter() - started)
        return response


__all__ = ["WebhookHandler", "WebhookProcessingError"]

# Fin del archivo backend/schoolpay/modules/payments/facades/webhooks/handler.py
