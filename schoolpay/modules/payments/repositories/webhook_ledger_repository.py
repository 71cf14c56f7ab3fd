# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/repositories/webhook_ledger_repository.py

Repositorio para la tabla webhook_ledger.

Responsabilidades:
- Búsqueda por webhook_id
- Candidatos a reintento y claim atómico (failed → retrying)
- Listados para herramientas de operación

Autor: SchoolPay
Fecha: 2026-10-17
"""

import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.database.repository import BaseRepository
from schoolpay.shared.utils.datetime_helpers import ensure_utc, utcnow
from schoolpay.modules.payments.enums import LedgerStatus
from schoolpay.modules.payments.models.webhook_ledger_models import WebhookLedgerEntry


class WebhookLedgerRepository(BaseRepository[WebhookLedgerEntry]):
    def __init__(self) -> None:
        super().__init__(WebhookLedgerEntry)

    # -----------------------------------------------------------
    # Lecturas puntuales
    # -----------------------------------------------------------
    async def get_by_webhook_id(
        self,
        session: AsyncSession,
        webhook_id: str,
    ) -> Optional[WebhookLedgerEntry]:
        stmt = select(WebhookLedgerEntry).where(WebhookLedgerEntry.webhook_id == webhook_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    # -----------------------------------------------------------
    # Reintentos
    # -----------------------------------------------------------
    async def list_retry_candidate_ids(
        self,
        session: AsyncSession,
        *,
        max_retries: int,
        limit: int,
        now: Optional[datetime] = None,
        lease_cutoff: Optional[datetime] = None,
    ) -> Sequence[int]:
        """
        Ids reintentables (FIFO):
        - failed, retry_count < max_retries y next_retry_at nulo o vencido
        - retrying con lease vencido (updated_at ≤ lease_cutoff): el worker
          que la reclamó murió sin cerrarla
        """
        now = now or utcnow()
        stmt = (
            select(WebhookLedgerEntry.id)
            .where(
                WebhookLedgerEntry.retry_count < max_retries,
                self._claimable(lease_cutoff),
                or_(
                    WebhookLedgerEntry.next_retry_at.is_(None),
                    WebhookLedgerEntry.next_retry_at <= now,
                ),
            )
            .order_by(WebhookLedgerEntry.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def claim_for_retry(
        self,
        session: AsyncSession,
        entry_id: int,
        *,
        lease_cutoff: Optional[datetime] = None,
    ) -> bool:
        """
        UPDATE condicional (failed | retrying vencida) → retrying.

        Devuelve True solo si esta llamada hizo la transición; otro worker
        que ya la reclamó deja rowcount en 0.
        """
        stmt = (
            update(WebhookLedgerEntry)
            .where(
                WebhookLedgerEntry.id == entry_id,
                self._claimable(lease_cutoff),
            )
            .values(status=LedgerStatus.RETRYING, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    @staticmethod
    def _claimable(lease_cutoff: Optional[datetime]):
        failed = WebhookLedgerEntry.status == LedgerStatus.FAILED
        if lease_cutoff is None:
            return failed
        stale = and_(
            WebhookLedgerEntry.status == LedgerStatus.RETRYING,
            WebhookLedgerEntry.updated_at <= lease_cutoff,
        )
        return or_(failed, stale)

    # -----------------------------------------------------------
    # Listados para operación
    # -----------------------------------------------------------
    async def list_entries(
        self,
        session: AsyncSession,
        *,
        status: Optional[LedgerStatus] = None,
        event_type: Optional[str] = None,
        order_id: Optional[uuid.UUID] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        exhausted_only: bool = False,
        max_retries: int = 3,
        limit: int = 50,
    ) -> Sequence[WebhookLedgerEntry]:
        stmt = select(WebhookLedgerEntry)

        if exhausted_only:
            stmt = stmt.where(
                WebhookLedgerEntry.status == LedgerStatus.FAILED,
                WebhookLedgerEntry.retry_count >= max_retries,
            )
        elif status is not None:
            stmt = stmt.where(WebhookLedgerEntry.status == status)

        if event_type:
            stmt = stmt.where(WebhookLedgerEntry.event_type == event_type)
        if order_id is not None:
            stmt = stmt.where(WebhookLedgerEntry.order_id == order_id)
        # Rango inclusivo sobre created_at, normalizado a UTC
        if created_from is not None:
            stmt = stmt.where(WebhookLedgerEntry.created_at >= ensure_utc(created_from))
        if created_to is not None:
            stmt = stmt.where(WebhookLedgerEntry.created_at <= ensure_utc(created_to))

        stmt = stmt.order_by(WebhookLedgerEntry.id.desc()).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

# Fin del archivo backend/schoolpay/modules/payments/repositories/webhook_ledger_repository.py
