# -*- coding: utf-8 -*-
"""
backend/schoolpay/core/__init__.py

Fachada de componentes centrales: configuración y logging.
La capa de datos se importa explícitamente desde `schoolpay.core.db`
(crea el engine al importarse).

Autor: SchoolPay
Fecha: 2026-10-17
"""

from .settings import get_settings
from .logging import setup_logging

__all__ = ["get_settings", "setup_logging"]
