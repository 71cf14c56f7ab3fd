# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/models/order_models.py

Orden de pago escolar: identidad y datos de intake inmutables.

La conciliación solo modifica `order_metadata` (caché de identificadores
del proveedor, último estado y última actualización por webhook).

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import secrets
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from schoolpay.shared.database.base import Base, JSONType


# Llaves de metadata donde se cachean identificadores del proveedor
METADATA_COLLECT_REQUEST_ID = "collect_request_id"
METADATA_COLLECT_ID = "collect_id"
METADATA_TRANSACTION_ID = "transaction_id"
METADATA_ORDER_ID = "order_id"

# Llaves que escribe la conciliación
METADATA_LAST_STATUS = "last_payment_status"
METADATA_LAST_WEBHOOK_UPDATE = "last_webhook_update"
METADATA_BANK_REFERENCE = "bank_reference"
METADATA_AMOUNT = "amount"


def generate_custom_order_id() -> str:
    """Referencia interna legible: ORD_<epoch_ms>_<8 hex>."""
    return f"ORD_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    custom_order_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        default=generate_custom_order_id,
        doc="Referencia interna generada al crear la orden (ORD_...).",
    )

    school_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trustee_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    student_info: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
        doc="Datos del alumno/pagador: name, id, email.",
    )

    gateway_name: Mapped[str] = mapped_column(String(64), nullable=False, default="edviron")

    amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        doc="Monto solicitado al crear la orden; último recurso al conciliar montos.",
    )

    order_metadata: Mapped[Dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )

    def __repr__(self) -> str:  # pragma: no cover - representacional
        return f"<Order id={self.id} custom_order_id={self.custom_order_id}>"


__all__ = [
    "Order",
    "generate_custom_order_id",
    "METADATA_COLLECT_REQUEST_ID",
    "METADATA_COLLECT_ID",
    "METADATA_TRANSACTION_ID",
    "METADATA_ORDER_ID",
    "METADATA_LAST_STATUS",
    "METADATA_LAST_WEBHOOK_UPDATE",
    "METADATA_BANK_REFERENCE",
    "METADATA_AMOUNT",
]

# Fin del archivo backend/schoolpay/modules/orders/models/order_models.py
