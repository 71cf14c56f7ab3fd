# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/enums/payment_status_enum.py

Estados canónicos del pago conciliado.

`pending` es el único estado no terminal. Una vez registrado un estado
terminal (success / failed / cancelled) no vuelve a cambiar.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from enum import StrEnum


class PaymentStatus(StrEnum):
    """Estado canónico de un PaymentRecord."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    __db_enum_name__ = "payment_status_enum"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[PaymentStatus] = frozenset({
    PaymentStatus.SUCCESS,
    PaymentStatus.FAILED,
    PaymentStatus.CANCELLED,
})


__all__ = ["PaymentStatus", "TERMINAL_STATUSES"]

# Fin del archivo backend/schoolpay/modules/payments/enums/payment_status_enum.py
