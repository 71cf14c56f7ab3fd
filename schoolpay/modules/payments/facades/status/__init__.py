# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/status/__init__.py

Consulta de estado de pago (local primero, pasarela como respaldo).
"""

from .gateway_client import (
    GatewayStatusClient,
    GatewayStatusSnapshot,
    GatewayStatusError,
    GatewayStatusTimeout,
    parse_gateway_status,
)
from .query import StatusQueryService

__all__ = [
    "GatewayStatusClient",
    "GatewayStatusSnapshot",
    "GatewayStatusError",
    "GatewayStatusTimeout",
    "parse_gateway_status",
    "StatusQueryService",
]
