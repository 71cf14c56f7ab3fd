# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/services/__init__.py

Servicios del ledger de webhooks (transiciones y sweep de reintentos).
"""
from .webhook_ledger_service import WebhookLedgerService, LedgerTransitionError
from .webhook_retry_service import WebhookRetryService

__all__ = ["WebhookLedgerService", "LedgerTransitionError", "WebhookRetryService"]
