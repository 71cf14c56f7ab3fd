# -*- coding: utf-8 -*-
"""
backend/schoolpay/core/db.py

Fachada de la capa de datos (SQLAlchemy async):
- engine / SessionLocal
- Base
- get_async_session
- check_database_health()

Importar este módulo crea el engine a partir de la configuración.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from schoolpay.shared.database.base import Base
from schoolpay.shared.database.database import (
    engine,
    SessionLocal,
    get_async_session,
    check_database_health,
)

__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_async_session",
    "check_database_health",
]

# Fin del archivo backend/schoolpay/core/db.py
