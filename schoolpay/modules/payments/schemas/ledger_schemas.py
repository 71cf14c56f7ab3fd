# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/schemas/ledger_schemas.py

Vista de entradas del ledger para herramientas de operación (/webhook/logs).

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schoolpay.modules.payments.enums import LedgerStatus


class WebhookLogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    webhook_id: str
    event_type: str
    status: LedgerStatus
    retry_count: int
    next_retry_at: Optional[datetime] = None
    error_message: Optional[str] = None
    processing_time_ms: Optional[int] = None
    processed_at: Optional[datetime] = None
    order_id: Optional[UUID] = None
    external_reference: Optional[str] = None
    gateway_status: Optional[str] = None
    normalized_status: Optional[str] = None
    ip_address: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class WebhookLogsResponse(BaseModel):
    count: int
    items: List[WebhookLogEntry]


__all__ = ["WebhookLogEntry", "WebhookLogsResponse"]

# Fin del archivo backend/schoolpay/modules/payments/schemas/ledger_schemas.py
