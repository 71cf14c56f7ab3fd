# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/schemas/__init__.py

Esquemas Pydantic del módulo Payments.
"""

from __future__ import annotations

from .webhook_schemas import WebhookOrderSummary, WebhookResponse, RetrySummary, RetrySweepResponse
from .status_schemas import StatusView, FINAL_STATUSES, NOT_FOUND_STATUS, UNKNOWN_STATUS
from .ledger_schemas import WebhookLogEntry, WebhookLogsResponse

__all__ = [
    "WebhookOrderSummary",
    "WebhookResponse",
    "RetrySummary",
    "RetrySweepResponse",
    "StatusView",
    "FINAL_STATUSES",
    "NOT_FOUND_STATUS",
    "UNKNOWN_STATUS",
    "WebhookLogEntry",
    "WebhookLogsResponse",
]

# Fin del archivo backend/schoolpay/modules/payments/schemas/__init__.py
