# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, base de datos aislada,
scheduler de reintentos apagado y sin llamadas a la pasarela.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from typing import Optional

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos: SQLite en memoria salvo que DB_URL diga otra cosa ---
    db_name: str = "schoolpay_test"
    db_url: Optional[str] = "sqlite+aiosqlite:///:memory:"

    # --- Ledger: el sweep se invoca a mano en las pruebas ---
    webhook_retry_scheduler_enabled: bool = False
    webhook_retry_attempt_timeout_seconds: float = 5.0

    # --- Pasarela: nunca consultar servicios reales ---
    gateway_status_url: Optional[str] = None
    gateway_status_timeout_seconds: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo backend/schoolpay/shared/config/settings_testing.py
