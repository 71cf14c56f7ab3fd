# -*- coding: utf-8 -*-
"""
backend/schoolpay/routes/health_routes.py

Health check básico del backend (liveness + conectividad a la base).

Autor: SchoolPay
Fecha: 2026-10-17
"""

from fastapi import APIRouter

from schoolpay.core.settings import get_settings
from schoolpay.core.db import check_database_health
from schoolpay.shared.utils.datetime_helpers import to_iso8601, utcnow

router = APIRouter()


@router.get("/health", summary="Health check del backend")
async def health_check() -> dict:
    settings = get_settings()
    db_ok = await check_database_health(timeout_s=2.0)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": to_iso8601(utcnow()),
        "environment": settings.python_env,
        "database": {"reachable": db_ok},
        "service": {"name": settings.app_name, "version": settings.app_version},
    }

# Fin del archivo backend/schoolpay/routes/health_routes.py
