# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/services/webhook_retry_service.py

Sweep de reintentos del ledger de webhooks.

Concurrencia:
- Un asyncio.Lock serializa los sweeps dentro del proceso (el job de
  APScheduler además corre con max_instances=1).
- Cada entrada se reclama con un UPDATE condicional failed → retrying;
  si otro worker ya la tomó (rowcount=0) se omite.
- Cada intento corre bajo asyncio.timeout; vencer el tiempo es una falla
  reintentable más.

Aislamiento: cada entrada usa su propia sesión y su propia transacción;
una entrada rota nunca aborta el sweep.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.utils.datetime_helpers import utcnow
from schoolpay.modules.payments.facades.reconciliation.core import ReconciliationEngine
from schoolpay.modules.payments.metrics.exporters.prometheus_exporter import observe_retry_result
from schoolpay.modules.payments.repositories import WebhookLedgerRepository
from .webhook_ledger_service import WebhookLedgerService

logger = logging.getLogger(__name__)

RESULT_SUCCESS = "success"
RESULT_RESCHEDULED = "rescheduled"
RESULT_EXHAUSTED = "exhausted"
RESULT_ERROR = "error"


class WebhookRetryService:
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        *,
        ledger_repo: WebhookLedgerRepository,
        ledger_service: WebhookLedgerService,
        engine: ReconciliationEngine,
        attempt_timeout_seconds: float = 30.0,
        batch_size: int = 100,
        lease_seconds: Optional[float] = None,
    ) -> None:
        self.session_factory = session_factory
        self.ledger_repo = ledger_repo
        self.ledger_service = ledger_service
        self.engine = engine
        self.attempt_timeout_seconds = attempt_timeout_seconds
        self.batch_size = batch_size
        # Una entrada en retrying más vieja que esto se considera abandonada
        self.lease_seconds = lease_seconds if lease_seconds is not None else attempt_timeout_seconds * 2
        self._lock = asyncio.Lock()

    async def retry_failed_webhooks(self) -> Dict[str, Any]:
        """
        Reprocesa las entradas failed con reintento vencido.

        Returns:
            {processed, results[], summary: {successful, rescheduled, exhausted}}
        """
        async with self._lock:
            async with self.session_factory() as session:
                candidate_ids = list(
                    await self.ledger_repo.list_retry_candidate_ids(
                        session,
                        max_retries=self.ledger_service.max_retries,
                        limit=self.batch_size,
                        lease_cutoff=self._lease_cutoff(),
                    )
                )
                # Cerrar la transacción de lectura antes de escribir por entrada
                await session.commit()

            results: List[Dict[str, Any]] = []
            for entry_id in candidate_ids:
                try:
                    outcome = await self._retry_entry(entry_id)
                except Exception as e:
                    logger.error(f"[webhook_retry] entry_id={entry_id} error inesperado: {e}", exc_info=True)
                    outcome = {"entryId": entry_id, "webhookId": None, "result": RESULT_ERROR, "error": str(e)}
                if outcome is not None:
                    results.append(outcome)

        summary = {
            "successful": sum(1 for r in results if r["result"] == RESULT_SUCCESS),
            "rescheduled": sum(1 for r in results if r["result"] == RESULT_RESCHEDULED),
            "exhausted": sum(1 for r in results if r["result"] == RESULT_EXHAUSTED),
        }
        logger.info(
            f"[webhook_retry] candidatos={len(candidate_ids)} procesados={len(results)} "
            f"ok={summary['successful']} reagendados={summary['rescheduled']} "
            f"agotados={summary['exhausted']}"
        )
        return {"processed": len(results), "results": results, "summary": summary}

    def _lease_cutoff(self) -> datetime:
        return utcnow() - timedelta(seconds=self.lease_seconds)

    async def _retry_entry(self, entry_id: int) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as session:
            try:
                claimed = await self.ledger_repo.claim_for_retry(
                    session, entry_id, lease_cutoff=self._lease_cutoff()
                )
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"[webhook_retry] claim falló entry_id={entry_id}: {e}", exc_info=True)
                return {"entryId": entry_id, "webhookId": None, "result": RESULT_ERROR, "error": str(e)}

            if not claimed:
                logger.info(f"[webhook_retry] entry_id={entry_id} ya reclamada por otro worker; se omite")
                return None

            entry = await self.ledger_repo.get(session, entry_id)
            webhook_id = entry.webhook_id
            started = time.perf_counter()

            try:
                async with asyncio.timeout(self.attempt_timeout_seconds):
                    event, result = await self.engine.reconcile_payload(session, entry.payload, entry.headers)
                    elapsed_ms = int((time.perf_counter() - started) * 1000)
                    await self.ledger_service.mark_processed(
                        session,
                        entry,
                        response={
                            "success": True,
                            "webhookId": webhook_id,
                            "message": "Webhook reprocessed successfully",
                            "order": result.to_order_summary(),
                        },
                        processing_time_ms=elapsed_ms,
                        order_id=result.order_id,
                        external_reference=event.external_reference,
                        gateway_status=event.gateway_status,
                        normalized_status=result.status.value if result.status else result.outcome.value,
                    )
                    await session.commit()
            except Exception as e:
                error = (
                    f"Retry attempt timed out after {self.attempt_timeout_seconds}s"
                    if isinstance(e, TimeoutError)
                    else str(e) or type(e).__name__
                )
                return await self._record_retry_failure(session, entry_id, webhook_id, error, started)

            observe_retry_result(RESULT_SUCCESS)
            return {
                "entryId": entry_id,
                "webhookId": webhook_id,
                "result": RESULT_SUCCESS,
                "status": result.status.value if result.status else result.outcome.value,
                "attempts": entry.retry_count,
            }

    async def _record_retry_failure(
        self,
        session: AsyncSession,
        entry_id: int,
        webhook_id: str,
        error: str,
        started: float,
    ) -> Dict[str, Any]:
        try:
            await session.rollback()
            entry = await self.ledger_repo.get(session, entry_id)
            await session.refresh(entry)
            await self.ledger_service.record_failure(
                session,
                entry,
                error=error,
                is_retry=True,
                processing_time_ms=int((time.perf_counter() - started) * 1000),
            )
            await session.commit()
        except Exception as e:
            # La entrada queda en retrying; vuelve a ser reclamable cuando vence el lease
            logger.error(
                f"[webhook_retry] no se pudo registrar la falla de {webhook_id}: {e}",
                exc_info=True,
            )
            observe_retry_result(RESULT_ERROR)
            return {"entryId": entry_id, "webhookId": webhook_id, "result": RESULT_ERROR, "error": str(e)}

        result = RESULT_EXHAUSTED if entry.next_retry_at is None else RESULT_RESCHEDULED
        observe_retry_result(result)
        return {
            "entryId": entry_id,
            "webhookId": webhook_id,
            "result": result,
            "error": error,
            "retryCount": entry.retry_count,
            "nextRetryAt": entry.next_retry_at.isoformat() if entry.next_retry_at else None,
        }


__all__ = [
    "WebhookRetryService",
    "RESULT_SUCCESS",
    "RESULT_RESCHEDULED",
    "RESULT_EXHAUSTED",
    "RESULT_ERROR",
]

# Fin del archivo backend/schoolpay/modules/payments/services/webhook_retry_service.py
