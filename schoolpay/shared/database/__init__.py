# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

El engine no se importa aquí: los modelos solo necesitan `Base`, y así
importar un modelo no obliga a construir el engine.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, JSONType, as_str_enum
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "JSONType",
    "as_str_enum",
    "BaseRepository",
]

# Fin del archivo backend/schoolpay/shared/database/__init__.py
