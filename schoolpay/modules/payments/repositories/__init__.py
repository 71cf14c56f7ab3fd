# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/repositories/__init__.py
"""

from .payment_record_repository import PaymentRecordRepository
from .webhook_ledger_repository import WebhookLedgerRepository

__all__ = ["PaymentRecordRepository", "WebhookLedgerRepository"]
