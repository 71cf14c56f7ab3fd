# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/schemas/webhook_schemas.py

Contratos de respuesta del endpoint de webhooks y del sweep de reintentos.

La respuesta del webhook es un tipo resultado: `success` distingue el
variante éxito/falla y el endpoint siempre responde HTTP 200.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WebhookOrderSummary(_CamelModel):
    """Resumen de la orden conciliada (o `order_not_found`)."""

    order_id: Optional[str] = None
    custom_order_id: Optional[str] = None
    provider_reference: Optional[str] = None
    status: str = Field(..., description="Estado canónico resultante u 'order_not_found'")
    order_amount: Optional[float] = None
    transaction_amount: Optional[float] = None
    previous_status: Optional[str] = None


class WebhookResponse(_CamelModel):
    success: bool
    webhook_id: Optional[str] = None
    message: str
    processing_time: Optional[int] = Field(default=None, description="Milisegundos")
    order: Optional[WebhookOrderSummary] = None

    def to_ledger_response(self) -> Dict[str, Any]:
        """Forma JSON que se guarda en `webhook_ledger.response`."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RetrySummary(BaseModel):
    successful: int = 0
    rescheduled: int = 0
    exhausted: int = 0


class RetrySweepResponse(BaseModel):
    processed: int
    results: List[Dict[str, Any]] = Field(default_factory=list)
    summary: RetrySummary


__all__ = ["WebhookOrderSummary", "WebhookResponse", "RetrySummary", "RetrySweepResponse"]

# Fin del archivo backend/schoolpay/modules/payments/schemas/webhook_schemas.py
