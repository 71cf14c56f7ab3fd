# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/models/payment_record_models.py

Estado de pago conciliado y autoritativo de una orden (uno por orden).

Se crea con el primer evento y después se actualiza en sitio mediante un
único upsert condicional (ver facades/reconciliation/core.py). Solo la
conciliación escribe esta tabla.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from schoolpay.shared.database.base import Base, JSONType, as_str_enum
from schoolpay.modules.payments.enums import PaymentStatus


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        doc="Orden dueña del registro; clave del upsert.",
    )

    status: Mapped[PaymentStatus] = mapped_column(
        as_str_enum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    order_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    transaction_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    payment_mode: Mapped[str] = mapped_column(String(64), nullable=False, default="unknown")

    bank_reference: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Referencia nativa de la pasarela (cf_payment_id, transaction_id...).",
    )

    gateway_status: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        doc="Estado crudo tal como lo envió la pasarela.",
    )

    capture_status: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        doc="Sub-estado de captura crudo; informativo, no participa en el mapeo.",
    )

    gateway_name: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    payment_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payment_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    last_event: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=True,
        doc="Copia del último payload crudo aplicado (depuración).",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "order_id",
            name="uq_payment_records_order_id",
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - representacional
        return f"<PaymentRecord order_id={self.order_id} status={self.status}>"


__all__ = ["PaymentRecord"]

# Fin del archivo backend/schoolpay/modules/payments/models/payment_record_models.py
