# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/__init__.py

Punto único de acceso a la configuración:
    from schoolpay.shared.config import settings, get_settings

`settings` es un proxy perezoso: no instancia la configuración en
import-time para evitar validaciones prematuras durante la recolección
de tests. Cada acceso delega en get_settings() (cacheado).
"""

from __future__ import annotations

from typing import Any

from .config_loader import get_settings
from .logging_config import setup_logging


class _SettingsProxy:
    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return f"<settings proxy for {type(get_settings()).__name__}>"


settings = _SettingsProxy()

__all__ = ["settings", "get_settings", "setup_logging"]
# Fin del archivo
