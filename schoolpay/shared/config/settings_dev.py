# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/settings_dev.py

Overrides para entorno de DESARROLLO (dev) usando Pydantic v2.
Hereda de BaseAppSettings y ajusta únicamente valores específicos
del ambiente local de desarrollo.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    # Entorno
    python_env: str = "development"

    # Logging
    log_level: str = "DEBUG"
    log_format: str = "plain"  # formato legible en consola

    # Base de datos
    db_sslmode: str = "disable"  # en desarrollo no se requiere SSL

    # Reintentos más frecuentes para depurar el ledger en local
    webhook_retry_base_delay_seconds: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["DevSettings"]

# Fin del archivo backend/schoolpay/shared/config/settings_dev.py
