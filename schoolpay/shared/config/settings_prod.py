# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/settings_prod.py

Overrides para entorno de PRODUCCIÓN usando Pydantic v2.
Forza lectura solo desde variables de entorno / secret stores,
activa logging estable (INFO en JSON) y defaults seguros.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from typing import Literal

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class ProdSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: Literal["development", "test", "production"] = "production"

    # --- Logging en prod: nivel estable y formato estructurado ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "pretty", "plain"] = "json"

    # --- Base de datos ---
    db_sslmode: str = "require"

    model_config = SettingsConfigDict(
        env_file=None,  # No leemos .env en producción
        extra="ignore",
    )


__all__ = ["ProdSettings"]
# Fin del archivo backend/schoolpay/shared/config/settings_prod.py
