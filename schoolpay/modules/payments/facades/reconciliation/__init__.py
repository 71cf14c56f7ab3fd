# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/reconciliation/__init__.py

Conciliación de eventos de pago: lattice de estados y motor de upsert.
"""

from .rules import map_gateway_status, is_transition_allowed
from .core import ReconciliationEngine, ReconcileResult, ReconcileOutcome, ORDER_NOT_FOUND_STATUS

__all__ = [
    "map_gateway_status",
    "is_transition_allowed",
    "ReconciliationEngine",
    "ReconcileResult",
    "ReconcileOutcome",
    "ORDER_NOT_FOUND_STATUS",
]
