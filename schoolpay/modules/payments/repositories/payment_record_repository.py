# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/repositories/payment_record_repository.py

Repositorio para la tabla payment_records.

Responsabilidades:
- Lectura del registro conciliado por orden
- Upsert atómico condicionado a `status = 'pending'`

El upsert es una sola sentencia INSERT ... ON CONFLICT (order_id) DO UPDATE
... WHERE payment_records.status = 'pending' RETURNING status. Si el WHERE
rechaza la actualización no se devuelve fila: otro evento ya dejó el
registro en un estado terminal.

Autor: SchoolPay
Fecha: 2026-10-17
"""

import uuid
from typing import Any, Dict, Mapping, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.database.repository import BaseRepository
from schoolpay.shared.utils.datetime_helpers import utcnow
from schoolpay.modules.payments.enums import PaymentStatus
from schoolpay.modules.payments.models.payment_record_models import PaymentRecord

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

UPSERT_FIELDS: Sequence[str] = (
    "status",
    "order_amount",
    "transaction_amount",
    "payment_mode",
    "bank_reference",
    "gateway_status",
    "capture_status",
    "gateway_name",
    "payment_details",
    "payment_message",
    "error_message",
    "payment_time",
    "last_event",
)


class PaymentRecordRepository(BaseRepository[PaymentRecord]):
    def __init__(self) -> None:
        super().__init__(PaymentRecord)

    # -----------------------------------------------------------
    # Lecturas
    # -----------------------------------------------------------
    async def get_by_order_id(
        self,
        session: AsyncSession,
        order_id: uuid.UUID,
    ) -> Optional[PaymentRecord]:
        stmt = (
            select(PaymentRecord)
            .where(PaymentRecord.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    # -----------------------------------------------------------
    # Upsert atómico
    # -----------------------------------------------------------
    async def upsert_if_pending(
        self,
        session: AsyncSession,
        *,
        order_id: uuid.UUID,
        values: Mapping[str, Any],
    ) -> Optional[PaymentStatus]:
        """
        Inserta el registro o lo actualiza solo si sigue en pending.

        `payment_time` ausente conserva el valor existente.

        Returns:
            El estado escrito, o None si el registro ya era terminal.
        """
        dialect = session.get_bind().dialect.name
        insert_fn = _INSERTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"Upsert no soportado para el dialecto '{dialect}'")

        unknown = set(values) - set(UPSERT_FIELDS)
        if unknown:
            raise ValueError(f"Campos no soportados en upsert: {sorted(unknown)}")

        table = PaymentRecord.__table__
        row: Dict[str, Any] = {
            **values,
            "order_id": order_id,
            "updated_at": utcnow(),
        }

        stmt = insert_fn(table).values(**row)
        excluded = stmt.excluded

        set_: Dict[str, Any] = {
            key: excluded[key] for key in row if key != "order_id"
        }
        set_["payment_time"] = func.coalesce(excluded.payment_time, table.c.payment_time)

        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.order_id],
            set_=set_,
            where=table.c.status == PaymentStatus.PENDING,
        ).returning(table.c.status)

        result = await session.execute(stmt)
        written = result.first()
        if written is None:
            return None
        return PaymentStatus(written.status)

# Fin del archivo backend/schoolpay/modules/payments/repositories/payment_record_repository.py
