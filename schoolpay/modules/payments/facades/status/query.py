# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/status/query.py

Consulta de estado de pago para el cliente (polling).

Local primero: si la orden tiene PaymentRecord se devuelve tal cual; el
registro conciliado siempre es igual o más fresco que una consulta en vivo.
Sin registro se consulta la pasarela (si hay cliente configurado) con
timeout acotado. Nunca lanza por un registro ausente: responde
`not_found` o `unknown` con una sugerencia de reintento.

La consulta en vivo no escribe PaymentRecord; solo el motor de
conciliación lo hace.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.modules.orders.models.order_models import Order
from schoolpay.modules.orders.services import IdentifierResolver
from schoolpay.modules.payments.enums import PaymentStatus
from schoolpay.modules.payments.facades.reconciliation.rules import map_gateway_status
from schoolpay.modules.payments.metrics.exporters.prometheus_exporter import observe_status_query
from schoolpay.modules.payments.models.payment_record_models import PaymentRecord
from schoolpay.modules.payments.repositories import PaymentRecordRepository
from schoolpay.modules.payments.schemas.status_schemas import (
    FINAL_STATUSES,
    NOT_FOUND_STATUS,
    RETRY_AFTER_MAX_SECONDS,
    RETRY_AFTER_MIN_SECONDS,
    UNKNOWN_STATUS,
    StatusView,
)
from .gateway_client import GatewayStatusClient, GatewayStatusError

logger = logging.getLogger(__name__)


def _as_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


class StatusQueryService:
    def __init__(
        self,
        *,
        resolver: IdentifierResolver,
        record_repo: PaymentRecordRepository,
        gateway_client: Optional[GatewayStatusClient] = None,
        retry_after_seconds: int = 5,
    ) -> None:
        self.resolver = resolver
        self.record_repo = record_repo
        self.gateway_client = gateway_client
        # Acotado al rango que admite StatusView
        self.retry_after_seconds = min(
            max(int(retry_after_seconds), RETRY_AFTER_MIN_SECONDS),
            RETRY_AFTER_MAX_SECONDS,
        )

    async def get_status(self, session: AsyncSession, reference: Any) -> StatusView:
        display_ref = "" if reference is None else str(reference)

        order = await self.resolver.resolve(session, reference)
        if order is None:
            logger.info(f"Consulta de estado sin orden: referencia={display_ref!r}")
            observe_status_query("none")
            return StatusView(
                reference=display_ref,
                status=NOT_FOUND_STATUS,
                source="none",
                retry_after_seconds=self.retry_after_seconds,
            )

        record = await self.record_repo.get_by_order_id(session, order.id)
        if record is not None:
            observe_status_query("local")
            return self._from_record(display_ref, order, record)

        if self.gateway_client is not None:
            try:
                snapshot = await self.gateway_client.fetch_status(order.custom_order_id)
            except GatewayStatusError as e:
                logger.warning(f"Consulta en vivo falló order={order.custom_order_id}: {e}")
            else:
                observe_status_query("gateway")
                status = map_gateway_status(snapshot.raw_status).value
                is_final = status in FINAL_STATUSES
                return StatusView(
                    reference=display_ref,
                    custom_order_id=order.custom_order_id,
                    status=status,
                    source="gateway",
                    is_final=is_final,
                    order_amount=_as_float(snapshot.amount or order.amount),
                    transaction_amount=_as_float(snapshot.transaction_amount),
                    payment_mode=snapshot.payment_mode,
                    bank_reference=snapshot.bank_reference,
                    payment_message=snapshot.message,
                    gateway_status=snapshot.raw_status,
                    retry_after_seconds=None if is_final else self.retry_after_seconds,
                )

        observe_status_query("none")
        return StatusView(
            reference=display_ref,
            custom_order_id=order.custom_order_id,
            status=UNKNOWN_STATUS,
            source="none",
            order_amount=_as_float(order.amount),
            retry_after_seconds=self.retry_after_seconds,
        )

    def _from_record(self, reference: str, order: Order, record: PaymentRecord) -> StatusView:
        status = PaymentStatus(record.status).value
        is_final = status in FINAL_STATUSES
        return StatusView(
            reference=reference,
            custom_order_id=order.custom_order_id,
            status=status,
            source="local",
            is_final=is_final,
            order_amount=_as_float(record.order_amount),
            transaction_amount=_as_float(record.transaction_amount),
            payment_mode=record.payment_mode,
            payment_time=record.payment_time,
            bank_reference=record.bank_reference,
            payment_message=record.payment_message,
            gateway_status=record.gateway_status,
            retry_after_seconds=None if is_final else self.retry_after_seconds,
        )


__all__ = ["StatusQueryService"]

# Fin del archivo backend/schoolpay/modules/payments/facades/status/query.py
