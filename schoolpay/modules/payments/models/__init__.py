# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/models/__init__.py

Importa todos los modelos para que queden registrados en Base.metadata.
"""

from schoolpay.modules.orders.models import Order  # noqa: F401  (FK orders.id)

from .payment_record_models import PaymentRecord
from .webhook_ledger_models import WebhookLedgerEntry, generate_webhook_id

__all__ = ["PaymentRecord", "WebhookLedgerEntry", "generate_webhook_id"]
