# -*- coding: utf-8 -*-
"""
backend/schoolpay/main.py

Punto de entrada del backend de conciliación de pagos de SchoolPay.

- .env cargado antes de leer la configuración
- Logging vía dictConfig (plain/pretty/json según LOG_FORMAT)
- Scheduler con el sweep de reintentos del ledger (si está habilitado)
- Cierre ordenado: scheduler → cliente HTTP de la pasarela → engine

Autor: SchoolPay
Fecha: 2026-10-17
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de cualquier import que lea la configuración
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_override_env = os.getenv("PYTHON_ENV", "development").strip().lower() != "production"
load_dotenv(dotenv_path=_ENV_PATH, override=_override_env)

from fastapi import FastAPI
import anyio

from schoolpay.core import get_settings, setup_logging

settings = get_settings()
setup_logging(level=settings.log_level, fmt=settings.log_format, service_name=settings.app_name.lower())
logger = logging.getLogger(__name__)

from schoolpay.routes import main_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    scheduler = None
    if settings.webhook_retry_scheduler_enabled:
        try:
            from schoolpay.shared.scheduler import get_scheduler
            from schoolpay.shared.scheduler.jobs import register_webhook_retry_job

            scheduler = get_scheduler()
            register_webhook_retry_job(
                scheduler,
                interval_seconds=settings.webhook_retry_sweep_interval_seconds,
            )
            scheduler.start()
            logger.info("Scheduler iniciado con el sweep de reintentos")
        except Exception as e:
            logger.warning(f"No se pudo iniciar scheduler: {e}")
            scheduler = None
    else:
        logger.info("Sweep de reintentos programado deshabilitado")

    logger.info(f"{settings.app_name} iniciado (env={settings.python_env})")
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        with anyio.CancelScope(shield=True):
            if scheduler is not None:
                try:
                    scheduler.shutdown(wait=True)
                except Exception as e:
                    logger.warning(f"Error deteniendo scheduler: {e}")

            try:
                from schoolpay.modules.payments.container import close_payment_clients

                await close_payment_clients()
            except Exception as e:
                logger.warning(f"Error cerrando clientes HTTP: {e}")

            try:
                from schoolpay.shared.database.database import engine

                await engine.dispose()
            except Exception as e:
                logger.warning(f"Error cerrando engine: {e}")

        logger.info(f"{settings.app_name} apagado")


app = FastAPI(
    title="SchoolPay API",
    description="Conciliación de webhooks de pagos escolares",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(main_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("schoolpay.main:app", host=settings.app_host, port=settings.app_port, reload=settings.is_dev)

# Fin del archivo backend/schoolpay/main.py
