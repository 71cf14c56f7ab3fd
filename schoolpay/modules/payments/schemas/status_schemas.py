# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/schemas/status_schemas.py

Vista de estado de pago para polling del cliente.

Contrato estable:
- status: pending/success/failed/cancelled, o not_found/unknown
- is_final=True → dejar de hacer polling
- retry_after_seconds solo cuando conviene volver a consultar
- source: local (registro conciliado), gateway (consulta en vivo), none

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOT_FOUND_STATUS = "not_found"
UNKNOWN_STATUS = "unknown"

RETRY_AFTER_MIN_SECONDS = 1
RETRY_AFTER_MAX_SECONDS = 60

# Estados que se consideran finales (no cambian más)
FINAL_STATUSES: frozenset[str] = frozenset({
    "success",
    "failed",
    "cancelled",
})

StatusSource = Literal["local", "gateway", "none"]


class StatusView(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reference: str = Field(..., description="Referencia consultada, tal como llegó")
    custom_order_id: Optional[str] = None
    status: str
    source: StatusSource = "none"
    is_final: bool = False
    order_amount: Optional[float] = None
    transaction_amount: Optional[float] = None
    payment_mode: Optional[str] = None
    payment_time: Optional[datetime] = None
    bank_reference: Optional[str] = None
    payment_message: Optional[str] = None
    gateway_status: Optional[str] = None
    retry_after_seconds: Optional[int] = Field(
        default=None,
        ge=RETRY_AFTER_MIN_SECONDS,
        le=RETRY_AFTER_MAX_SECONDS,
        description="Segundos sugeridos antes del próximo poll",
    )


__all__ = [
    "StatusView",
    "StatusSource",
    "FINAL_STATUSES",
    "NOT_FOUND_STATUS",
    "UNKNOWN_STATUS",
    "RETRY_AFTER_MIN_SECONDS",
    "RETRY_AFTER_MAX_SECONDS",
]

# Fin del archivo backend/schoolpay/modules/payments/schemas/status_schemas.py
