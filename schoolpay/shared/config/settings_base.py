# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/settings_base.py

Base de configuración (Pydantic v2) para SchoolPay.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from typing import Literal, Optional

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="SchoolPay", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="schoolpay", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=5, validation_alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=1800, validation_alias="DB_POOL_RECYCLE")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_sslmode: str = Field(default="prefer", validation_alias="DB_SSLMODE")  # prefer|require|disable
    db_command_timeout_s: float = Field(default=5.0, validation_alias="DB_COMMAND_TIMEOUT_S")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Genera la URL de conexión completa para SQLAlchemy async.
        Prioriza DB_URL si existe, sino construye desde componentes individuales.
        Las URLs sqlite se respetan tal cual (usadas en pruebas locales).
        """
        from urllib.parse import quote_plus

        if self.db_url:
            url = self.db_url
            if url.startswith("sqlite"):
                return url
            url = (
                url.replace("postgres://", "postgresql+asyncpg://")
                   .replace("postgresql://", "postgresql+asyncpg://")
            )
            return url

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Webhooks: ledger y reintentos
    # =========================
    webhook_max_retries: int = Field(default=3, validation_alias="WEBHOOK_MAX_RETRIES")
    webhook_retry_base_delay_seconds: int = Field(
        default=60,
        validation_alias="WEBHOOK_RETRY_BASE_DELAY_SECONDS",
        description="Retraso base del backoff exponencial (base × 2^retry_count).",
    )
    webhook_retry_attempt_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="WEBHOOK_RETRY_ATTEMPT_TIMEOUT_SECONDS",
    )
    webhook_retry_sweep_interval_seconds: int = Field(
        default=60,
        validation_alias="WEBHOOK_RETRY_SWEEP_INTERVAL_SECONDS",
    )
    webhook_retry_batch_size: int = Field(default=100, validation_alias="WEBHOOK_RETRY_BATCH_SIZE")
    webhook_retry_scheduler_enabled: bool = Field(
        default=True,
        validation_alias="WEBHOOK_RETRY_SCHEDULER_ENABLED",
    )
    webhook_logs_max_limit: int = Field(default=200, validation_alias="WEBHOOK_LOGS_MAX_LIMIT")

    # =========================
    # Consulta de estado (fallback a la pasarela)
    # =========================
    gateway_status_url: Optional[str] = Field(default=None, validation_alias="GATEWAY_STATUS_URL")
    gateway_api_key: Optional[SecretStr] = Field(default=None, validation_alias="GATEWAY_API_KEY")
    gateway_status_timeout_seconds: float = Field(default=5.0, validation_alias="GATEWAY_STATUS_TIMEOUT_SECONDS")
    status_retry_after_seconds: int = Field(default=5, validation_alias="STATUS_RETRY_AFTER_SECONDS")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")
    metrics_enabled: bool = Field(default=True, validation_alias="METRICS_ENABLED")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    def _security_and_webhook_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.is_prod and self.db_sslmode != "require":
            raise ValueError("DB_SSLMODE debe ser 'require' en producción")

        if self.webhook_max_retries < 0:
            raise ValueError("WEBHOOK_MAX_RETRIES no puede ser negativo.")
        if self.webhook_retry_base_delay_seconds <= 0:
            raise ValueError("WEBHOOK_RETRY_BASE_DELAY_SECONDS debe ser mayor que cero.")
        if self.webhook_retry_attempt_timeout_seconds <= 0:
            raise ValueError("WEBHOOK_RETRY_ATTEMPT_TIMEOUT_SECONDS debe ser mayor que cero.")
        if self.gateway_status_timeout_seconds <= 0:
            raise ValueError("GATEWAY_STATUS_TIMEOUT_SECONDS debe ser mayor que cero.")
        if not 1 <= self.status_retry_after_seconds <= 60:
            raise ValueError("STATUS_RETRY_AFTER_SECONDS debe estar entre 1 y 60.")

        if self.is_dev and not self.gateway_status_url:
            logger.info("GATEWAY_STATUS_URL vacío: la consulta de estado será solo local")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo backend/schoolpay/shared/config/settings_base.py
