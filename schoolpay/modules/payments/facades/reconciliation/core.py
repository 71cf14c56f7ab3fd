# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/reconciliation/core.py

Motor de conciliación: aplica un PaymentEvent sobre el PaymentRecord de su orden.

Pasos:
1. Resolver la orden con el IdentifierResolver
2. Si no existe → resultado `order_not_found` (no es error; el webhook
   puede llegar antes de que la orden se persista)
3. Mapear el estado crudo con el lattice
4. Leer el registro previo y aplicar la guardia de transición
5. Resolver montos: evento → monto de la orden → monto cacheado en su
   metadata → 0
6. Upsert atómico condicionado a pending (una sola sentencia)
7. Refrescar la metadata de la orden dentro de un SAVEPOINT (best-effort)

Los colaboradores se reciben por constructor; no hay wiring global.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.utils.datetime_helpers import to_iso8601, utcnow
from schoolpay.modules.orders.models.order_models import (
    Order,
    METADATA_AMOUNT,
    METADATA_BANK_REFERENCE,
    METADATA_COLLECT_REQUEST_ID,
    METADATA_LAST_STATUS,
    METADATA_LAST_WEBHOOK_UPDATE,
    METADATA_TRANSACTION_ID,
)
from schoolpay.modules.orders.repositories import OrderRepository
from schoolpay.modules.orders.services import IdentifierResolver
from schoolpay.modules.payments.enums import PaymentStatus
from schoolpay.modules.payments.facades.webhooks.normalize import (
    PaymentEvent,
    normalize_payload,
    resolve_amount,
)
from schoolpay.modules.payments.repositories import PaymentRecordRepository
from .rules import is_transition_allowed, map_gateway_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ORDER_NOT_FOUND_STATUS = "order_not_found"


class ReconcileOutcome(StrEnum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"  # la guardia rechazó la transición
    ORDER_NOT_FOUND = "order_not_found"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: ReconcileOutcome
    provider_reference: str
    status: Optional[PaymentStatus] = None
    previous_status: Optional[PaymentStatus] = None
    order_id: Optional[uuid.UUID] = None
    custom_order_id: Optional[str] = None
    order_amount: Optional[Decimal] = None
    transaction_amount: Optional[Decimal] = None

    @property
    def order_found(self) -> bool:
        return self.outcome != ReconcileOutcome.ORDER_NOT_FOUND

    def to_order_summary(self) -> Dict[str, Any]:
        """Resumen camelCase para la respuesta del webhook."""
        return {
            "orderId": str(self.order_id) if self.order_id else None,
            "customOrderId": self.custom_order_id,
            "providerReference": self.provider_reference,
            "status": self.status.value if self.status else ORDER_NOT_FOUND_STATUS,
            "orderAmount": float(self.order_amount) if self.order_amount is not None else None,
            "transactionAmount": (
                float(self.transaction_amount) if self.transaction_amount is not None else None
            ),
            "previousStatus": self.previous_status.value if self.previous_status else None,
        }


StatusMapper = Callable[[Any, Any], PaymentStatus]
TransitionGuard = Callable[[Optional[PaymentStatus], PaymentStatus], bool]
Normalizer = Callable[..., PaymentEvent]


class ReconciliationEngine:
    """Orquesta resolver + lattice + upsert para un evento normalizado."""

    def __init__(
        self,
        *,
        resolver: IdentifierResolver,
        record_repo: PaymentRecordRepository,
        order_repo: OrderRepository,
        normalizer: Normalizer = normalize_payload,
        status_mapper: StatusMapper = map_gateway_status,
        transition_guard: TransitionGuard = is_transition_allowed,
    ) -> None:
        self.resolver = resolver
        self.record_repo = record_repo
        self.order_repo = order_repo
        self.normalizer = normalizer
        self.status_mapper = status_mapper
        self.transition_guard = transition_guard

    # -----------------------------------------------------------
    # Entradas
    # -----------------------------------------------------------
    async def reconcile_payload(
        self,
        session: AsyncSession,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Tuple[PaymentEvent, ReconcileResult]:
        """Normaliza y concilia; usado por el handler y por los reintentos."""
        event = self.normalizer(body, headers)
        result = await self.reconcile(session, event)
        return event, result

    async def reconcile(self, session: AsyncSession, event: PaymentEvent) -> ReconcileResult:
        reference = event.external_reference

        # 1) Resolver orden
        order = await self.resolver.resolve(session, reference)
        if order is None:
            logger.warning(f"Conciliación sin orden: referencia={reference} shape={event.shape}")
            return ReconcileResult(
                outcome=ReconcileOutcome.ORDER_NOT_FOUND,
                provider_reference=reference,
            )

        order_id = order.id
        custom_order_id = order.custom_order_id

        # 2) Estado canónico
        new_status = self.status_mapper(event.gateway_status, event.capture_status)

        # 3) Registro previo + guardia (lectura informativa; el upsert vuelve a verificar)
        existing = await self.record_repo.get_by_order_id(session, order_id)
        previous_status = PaymentStatus(existing.status) if existing is not None else None

        if not self.transition_guard(previous_status, new_status):
            logger.info(
                f"Transición rechazada order={custom_order_id}: "
                f"{previous_status} → {new_status} (se conserva {previous_status})"
            )
            return self._unchanged(reference, order_id, custom_order_id, existing)

        # 4) Montos
        order_amount = resolve_amount(
            event.order_amount,
            event.transaction_amount,
            order.amount,
            (order.order_metadata or {}).get(METADATA_AMOUNT),
        ) or ZERO
        transaction_amount = resolve_amount(event.transaction_amount, order_amount) or ZERO

        # 5) Upsert atómico
        payment_time = event.timestamp
        if payment_time is None and new_status.is_terminal:
            payment_time = utcnow()

        written = await self.record_repo.upsert_if_pending(
            session,
            order_id=order_id,
            values={
                "status": new_status,
                "order_amount": order_amount,
                "transaction_amount": transaction_amount,
                "payment_mode": event.payment_mode,
                "bank_reference": event.gateway_reference,
                "gateway_status": event.gateway_status,
                "capture_status": event.capture_status,
                "gateway_name": event.gateway_name,
                "payment_details": event.payment_details,
                "payment_message": event.message,
                "error_message": event.error,
                "payment_time": payment_time,
                "last_event": event.raw,
            },
        )

        if written is None:
            # Otro evento concurrente dejó el registro terminal entre la lectura y el upsert
            current = await self.record_repo.get_by_order_id(session, order_id)
            logger.info(
                f"Upsert rechazado por estado terminal concurrente order={custom_order_id} "
                f"(actual={current.status if current else None})"
            )
            return self._unchanged(reference, order_id, custom_order_id, current)

        # 6) Metadata (best-effort)
        await self._refresh_order_metadata(session, order, event, written, order_amount)

        logger.info(
            f"Pago conciliado order={custom_order_id}: {previous_status} → {written} "
            f"monto={order_amount} modo={event.payment_mode}"
        )
        return ReconcileResult(
            outcome=ReconcileOutcome.UPDATED,
            provider_reference=reference,
            status=written,
            previous_status=previous_status,
            order_id=order_id,
            custom_order_id=custom_order_id,
            order_amount=order_amount,
            transaction_amount=transaction_amount,
        )

    # -----------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------
    @staticmethod
    def _unchanged(
        reference: str,
        order_id: uuid.UUID,
        custom_order_id: str,
        record: Any,
    ) -> ReconcileResult:
        status = PaymentStatus(record.status) if record is not None else None
        return ReconcileResult(
            outcome=ReconcileOutcome.UNCHANGED,
            provider_reference=reference,
            status=status,
            previous_status=status,
            order_id=order_id,
            custom_order_id=custom_order_id,
            order_amount=record.order_amount if record is not None else None,
            transaction_amount=record.transaction_amount if record is not None else None,
        )

    async def _refresh_order_metadata(
        self,
        session: AsyncSession,
        order: Order,
        event: PaymentEvent,
        status: PaymentStatus,
        order_amount: Decimal,
    ) -> None:
        updates: Dict[str, Any] = {
            METADATA_LAST_STATUS: status.value,
            METADATA_LAST_WEBHOOK_UPDATE: to_iso8601(utcnow()),
            METADATA_BANK_REFERENCE: event.gateway_reference,
            METADATA_TRANSACTION_ID: event.gateway_reference,
        }
        # Un 0 no pisa el último monto conocido
        if order_amount > ZERO:
            updates[METADATA_AMOUNT] = str(order_amount)
        current = order.order_metadata or {}
        if (
            event.external_reference != order.custom_order_id
            and not current.get(METADATA_COLLECT_REQUEST_ID)
        ):
            updates[METADATA_COLLECT_REQUEST_ID] = event.external_reference

        custom_order_id = order.custom_order_id
        try:
            async with session.begin_nested():
                await self.order_repo.merge_metadata(session, order, updates)
        except SQLAlchemyError as e:
            logger.warning(f"No se pudo refrescar metadata de order={custom_order_id}: {e}")


__all__ = [
    "ReconciliationEngine",
    "ReconcileResult",
    "ReconcileOutcome",
    "ORDER_NOT_FOUND_STATUS",
]

# Fin del archivo backend/schoolpay/modules/payments/facades/reconciliation/core.py
