# -*- coding: utf-8 -*-
"""
backend/schoolpay/routes/__init__.py

Ruteador maestro: health en la raíz y módulos bajo API_PREFIX.
"""

from fastapi import APIRouter

from schoolpay.shared.config import settings
from schoolpay.modules.payments.routes import router as payments_router
from .health_routes import router as health_router

main_router = APIRouter()
main_router.include_router(health_router)
main_router.include_router(payments_router, prefix=settings.api_prefix)

__all__ = ["main_router"]
