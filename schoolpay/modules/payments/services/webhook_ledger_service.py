# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/services/webhook_ledger_service.py

Servicio del ledger de webhooks: único camino de transición de estado.

Ciclo de vida:
    pending → processing → processed | failed
    failed  → retrying   → processed | failed

Backoff de fallas:
- La falla inicial deja retry_count=0 y agenda el primer reintento en `base`.
- Cada reintento fallido incrementa retry_count y agenda en base × 2^retry_count.
- Con retry_count ≥ max_retries la entrada queda failed sin next_retry_at
  (requiere atención de un operador).

Este servicio solo hace flush; el commit lo decide quien lo invoca.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.utils.datetime_helpers import utcnow
from schoolpay.modules.payments.enums import LedgerStatus
from schoolpay.modules.payments.models.webhook_ledger_models import (
    WebhookLedgerEntry,
    generate_webhook_id,
)
from schoolpay.modules.payments.repositories import WebhookLedgerRepository

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 2000

_ALLOWED_TRANSITIONS: Dict[LedgerStatus, frozenset[LedgerStatus]] = {
    LedgerStatus.PENDING: frozenset({LedgerStatus.PROCESSING, LedgerStatus.FAILED}),
    LedgerStatus.PROCESSING: frozenset({LedgerStatus.PROCESSED, LedgerStatus.FAILED}),
    LedgerStatus.FAILED: frozenset({LedgerStatus.RETRYING}),
    LedgerStatus.RETRYING: frozenset({LedgerStatus.PROCESSED, LedgerStatus.FAILED}),
    LedgerStatus.PROCESSED: frozenset(),
}


class LedgerTransitionError(RuntimeError):
    """Transición de ledger no permitida (error de programación)."""
    pass


class WebhookLedgerService:
    def __init__(
        self,
        ledger_repo: WebhookLedgerRepository,
        *,
        max_retries: int = 3,
        base_delay_seconds: int = 60,
    ) -> None:
        self.ledger_repo = ledger_repo
        self.max_retries = max_retries
        self.base_delay_seconds = base_delay_seconds

    # -----------------------------------------------------------
    # Alta
    # -----------------------------------------------------------
    async def open_entry(
        self,
        session: AsyncSession,
        *,
        payload: Any,
        headers: Optional[Mapping[str, str]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        event_type: str = "payment_update",
    ) -> WebhookLedgerEntry:
        entry = await self.ledger_repo.create(
            session,
            webhook_id=generate_webhook_id(),
            event_type=event_type,
            payload=payload if isinstance(payload, dict) else {"_body": payload},
            headers={str(k): str(v) for k, v in (headers or {}).items()},
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
            status=LedgerStatus.PENDING,
            retry_count=0,
        )
        logger.info(f"Webhook registrado en ledger: {entry.webhook_id} event_type={event_type}")
        return entry

    # -----------------------------------------------------------
    # Transiciones
    # -----------------------------------------------------------
    def _transition(self, entry: WebhookLedgerEntry, target: LedgerStatus) -> None:
        current = LedgerStatus(entry.status)
        if target not in _ALLOWED_TRANSITIONS[current]:
            raise LedgerTransitionError(
                f"Ledger {entry.webhook_id}: transición {current} → {target} no permitida"
            )
        entry.status = target
        entry.updated_at = utcnow()

    async def mark_processing(self, session: AsyncSession, entry: WebhookLedgerEntry) -> WebhookLedgerEntry:
        self._transition(entry, LedgerStatus.PROCESSING)
        await session.flush()
        return entry

    async def mark_processed(
        self,
        session: AsyncSession,
        entry: WebhookLedgerEntry,
        *,
        response: Dict[str, Any],
        processing_time_ms: Optional[int] = None,
        order_id: Any = None,
        external_reference: Optional[str] = None,
        gateway_status: Optional[str] = None,
        normalized_status: Optional[str] = None,
    ) -> WebhookLedgerEntry:
        self._transition(entry, LedgerStatus.PROCESSED)
        entry.processed_at = utcnow()
        entry.processing_time_ms = processing_time_ms
        entry.response = response
        entry.error_message = None
        entry.next_retry_at = None
        entry.order_id = order_id
        entry.external_reference = external_reference
        entry.gateway_status = gateway_status
        entry.normalized_status = normalized_status
        await session.flush()

        logger.info(
            f"Webhook {entry.webhook_id} procesado en {processing_time_ms}ms "
            f"(status={normalized_status}, intentos={entry.retry_count})"
        )
        return entry

    async def record_failure(
        self,
        session: AsyncSession,
        entry: WebhookLedgerEntry,
        *,
        error: str,
        is_retry: bool,
        processing_time_ms: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> WebhookLedgerEntry:
        """
        Marca la entrada como failed y agenda (o no) el siguiente reintento.

        Args:
            is_retry: True si la falla ocurrió dentro de un reintento del sweep
        """
        now = now or utcnow()
        self._transition(entry, LedgerStatus.FAILED)

        if is_retry:
            entry.retry_count = (entry.retry_count or 0) + 1

        entry.next_retry_at = self.compute_next_retry_at(entry.retry_count, now)
        entry.error_message = (error or "unknown error")[:MAX_ERROR_MESSAGE_LENGTH]
        entry.processed_at = now
        if processing_time_ms is not None:
            entry.processing_time_ms = processing_time_ms
        if response is not None:
            entry.response = response
        await session.flush()

        if entry.next_retry_at is None:
            logger.error(
                f"Webhook {entry.webhook_id} agotó reintentos ({entry.retry_count}/{self.max_retries}): "
                f"{entry.error_message}"
            )
        else:
            logger.warning(
                f"Webhook {entry.webhook_id} falló (intento {entry.retry_count}); "
                f"próximo reintento {entry.next_retry_at.isoformat()}: {entry.error_message}"
            )
        return entry

    # -----------------------------------------------------------
    # Backoff
    # -----------------------------------------------------------
    def compute_next_retry_at(self, retry_count: int, now: datetime) -> Optional[datetime]:
        """
        base × 2^retry_count, o None si se alcanzó el techo de reintentos.

        Examples (base=60, max=3):
            retry_count=0 → now + 60s
            retry_count=1 → now + 120s
            retry_count=2 → now + 240s
            retry_count=3 → None
        """
        if retry_count >= self.max_retries:
            return None
        return now + timedelta(seconds=self.base_delay_seconds * (2 ** retry_count))

    def is_exhausted(self, entry: WebhookLedgerEntry) -> bool:
        return (
            LedgerStatus(entry.status) == LedgerStatus.FAILED
            and (entry.retry_count or 0) >= self.max_retries
        )


__all__ = ["WebhookLedgerService", "LedgerTransitionError"]

# Fin del archivo backend/schoolpay/modules/payments/services/webhook_ledger_service.py
