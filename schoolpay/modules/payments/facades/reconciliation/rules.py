# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/reconciliation/rules.py

Lattice de estados de pago (funciones puras).

- map_gateway_status: estado crudo de la pasarela → PaymentStatus canónico.
- is_transition_allowed: guardia de transición; solo se sobrescribe un
  registro ausente o en `pending`.

Sub-estado de captura: se recibe y se guarda para depuración, pero no
participa en el mapeo. Un SUCCESS con captura pendiente es success.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Optional

from schoolpay.modules.payments.enums import PaymentStatus, TERMINAL_STATUSES

SUCCESS_GATEWAY_STATUSES: frozenset[str] = frozenset({"SUCCESS", "COMPLETED", "PAID"})
FAILED_GATEWAY_STATUSES: frozenset[str] = frozenset({"FAILED", "DECLINED", "ERROR"})
CANCELLED_GATEWAY_STATUSES: frozenset[str] = frozenset({"USER_DROPPED", "CANCELLED", "CANCELED"})


def map_gateway_status(raw_status: Any, capture_status: Any = None) -> PaymentStatus:
    """
    Mapea el estado crudo de la pasarela a un estado canónico.

    Cualquier valor desconocido, vacío o no-string cae en pending.

    Examples:
        >>> map_gateway_status("paid")
        <PaymentStatus.SUCCESS: 'success'>
        >>> map_gateway_status("USER_DROPPED")
        <PaymentStatus.CANCELLED: 'cancelled'>
        >>> map_gateway_status(None)
        <PaymentStatus.PENDING: 'pending'>
    """
    if not isinstance(raw_status, str):
        return PaymentStatus.PENDING

    normalized = raw_status.strip().upper()
    if normalized in SUCCESS_GATEWAY_STATUSES:
        return PaymentStatus.SUCCESS
    if normalized in FAILED_GATEWAY_STATUSES:
        return PaymentStatus.FAILED
    if normalized in CANCELLED_GATEWAY_STATUSES:
        return PaymentStatus.CANCELLED
    return PaymentStatus.PENDING


def is_transition_allowed(
    old: Optional[PaymentStatus | str],
    new: Optional[PaymentStatus | str] = None,
) -> bool:
    """
    True si `old` está ausente o en pending; False si `old` es terminal,
    sin importar `new` (ni siquiera otro terminal lo sobrescribe).
    """
    if old is None:
        return True
    return PaymentStatus(old) not in TERMINAL_STATUSES


__all__ = [
    "map_gateway_status",
    "is_transition_allowed",
    "SUCCESS_GATEWAY_STATUSES",
    "FAILED_GATEWAY_STATUSES",
    "CANCELLED_GATEWAY_STATUSES",
]

# Fin del archivo backend/schoolpay/modules/payments/facades/reconciliation/rules.py
