# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/enums/ledger_status_enum.py

Ciclo de vida de una entrada del ledger de webhooks:

    pending → processing → processed | failed
    failed  → retrying   → processed | failed

Autor: SchoolPay
Fecha: 2026-10-17
"""

from enum import StrEnum


class LedgerStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"
    RETRYING = "retrying"

    __db_enum_name__ = "webhook_ledger_status_enum"


__all__ = ["LedgerStatus"]

# Fin del archivo backend/schoolpay/modules/payments/enums/ledger_status_enum.py
