# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/config/logging_config.py

Logging del backend de conciliación.

- plain/pretty: una línea legible por evento (desarrollo)
- json: JsonFormatter de python-json-logger con el campo estático
  `service`, para filtrar en el agregador de logs (producción)

Los loggers de terceros que escriben una línea por request (httpx hacia la
pasarela) o por checkout del pool (SQLAlchemy) se fijan en WARNING.

Autor: SchoolPay
Fecha: 2026-10-17
"""

import logging.config
from typing import Any, Dict, Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_NOISY_LOGGERS = ("sqlalchemy.pool", "httpx", "httpcore")


def build_logging_config(
    level: LogLevel = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
    service_name: str = "schoolpay",
) -> Dict[str, Any]:
    level = level.upper()
    formatter = "json" if fmt == "json" else "console"

    loggers: Dict[str, Any] = {name: {"level": "WARNING"} for name in _NOISY_LOGGERS}
    # El sweep de reintentos corre cada minuto; APScheduler anuncia cada ejecución en INFO
    loggers["apscheduler"] = {"level": "WARNING" if level in ("DEBUG", "INFO") else level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "static_fields": {"service": service_name},
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }


def setup_logging(
    level: LogLevel = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
    service_name: str = "schoolpay",
) -> None:
    """
    Aplica la configuración de logging (idempotente: dictConfig reemplaza la anterior).

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json", service_name="schoolpay-payments")
    """
    logging.config.dictConfig(build_logging_config(level, fmt, service_name))


__all__ = ["setup_logging", "build_logging_config"]
# Fin del archivo backend/schoolpay/shared/config/logging_config.py
