# -*- coding: utf-8 -*-
"""
backend/schoolpay/core/settings.py

Fachada de configuración de SchoolPay.
Reexpone la carga de settings (Pydantic v2) definida en
`schoolpay.shared.config`.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from typing import cast

from schoolpay.shared.config.config_loader import get_settings as _get_settings
from schoolpay.shared.config.settings_base import BaseAppSettings


def get_settings() -> BaseAppSettings:
    """Devuelve la configuración global (según PYTHON_ENV)."""
    return cast(BaseAppSettings, _get_settings())

# Fin del archivo backend/schoolpay/core/settings.py
