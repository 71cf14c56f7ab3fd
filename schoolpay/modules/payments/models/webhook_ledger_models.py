# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/models/webhook_ledger_models.py

Ledger de auditoría: una fila por webhook recibido.

Solo se modifican campos de ciclo de vida, reintento y resumen de
respuesta; el payload y los headers quedan tal como llegaron.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import secrets
import time
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from schoolpay.shared.database.base import Base, JSONType, as_str_enum
from schoolpay.modules.payments.enums import LedgerStatus


def generate_webhook_id() -> str:
    """Id de ledger: WH_<epoch_ms>_<8 hex>."""
    return f"WH_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class WebhookLedgerEntry(Base):
    __tablename__ = "webhook_ledger"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    webhook_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        default=generate_webhook_id,
    )

    event_type: Mapped[str] = mapped_column(String(128), nullable=False, default="payment_update")

    payload: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        doc="Body del webhook tal como llegó.",
    )
    headers: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    status: Mapped[LedgerStatus] = mapped_column(
        as_str_enum(LedgerStatus),
        nullable=False,
        default=LedgerStatus.PENDING,
    )

    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_retry_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    processing_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Orden resuelta; nula hasta que la resolución tiene éxito.",
    )

    external_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gateway_status: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    normalized_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

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

    __table_args__ = (
        Index("ix_webhook_ledger_status_next_retry_at", "status", "next_retry_at"),
        Index("ix_webhook_ledger_event_type", "event_type"),
    )

    def __repr__(self) -> str:  # pragma: no cover - representacional
        return f"<WebhookLedgerEntry webhook_id={self.webhook_id} status={self.status}>"


__all__ = ["WebhookLedgerEntry", "generate_webhook_id"]

# Fin del archivo backend/schoolpay/modules/payments/models/webhook_ledger_models.py
