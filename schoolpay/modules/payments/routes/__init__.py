# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/routes/__init__.py

Ensamblador de rutas del módulo Payments.

Incluye:
- /webhook, /webhook/retry, /webhook/logs
- /payments/status/{reference}
- /payments/metrics, /payments/metrics/ping

Autor: SchoolPay
Fecha: 2026-10-17
"""

from fastapi import APIRouter

from schoolpay.modules.payments.metrics.routes import router_prometheus
from .webhooks import router as webhooks_router
from .status import router as status_router

router = APIRouter()

router.include_router(webhooks_router)
router.include_router(status_router)
router.include_router(router_prometheus, prefix="/payments")

__all__ = ["router"]

# Fin del archivo backend/schoolpay/modules/payments/routes/__init__.py
