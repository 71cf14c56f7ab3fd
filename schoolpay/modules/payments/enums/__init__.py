# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/enums/__init__.py

Superficie de exportación de enums del módulo Payments.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from .payment_status_enum import PaymentStatus, TERMINAL_STATUSES
from .ledger_status_enum import LedgerStatus
from .payload_shape_enum import PayloadShape

__all__ = [
    "PaymentStatus",
    "TERMINAL_STATUSES",
    "LedgerStatus",
    "PayloadShape",
]

# Fin del archivo backend/schoolpay/modules/payments/enums/__init__.py
