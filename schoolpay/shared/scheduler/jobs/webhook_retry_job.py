# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/scheduler/jobs/webhook_retry_job.py

Job programado del sweep de reintentos del ledger de webhooks.

El scheduler corre el job con coalesce=True y max_instances=1; además el
servicio serializa sweeps con su propio asyncio.Lock (la ruta manual
POST /webhook/retry comparte la misma instancia).

Autor: SchoolPay
Fecha: 2026-10-17
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

JOB_ID = "webhook_retry_sweep"


async def run_webhook_retry_sweep() -> Dict[str, Any]:
    """
    Ejecuta un sweep. Nunca propaga: APScheduler solo registraría el
    error y el siguiente intervalo vuelve a intentar.
    """
    from schoolpay.modules.payments.container import get_retry_service

    try:
        result = await get_retry_service().retry_failed_webhooks()
    except Exception as e:
        logger.error("[webhook_retry_job] sweep falló: %s", str(e), exc_info=True)
        return {"error": str(e), "processed": 0}

    if result["processed"]:
        logger.info(
            "[webhook_retry_job] processed=%d summary=%s",
            result["processed"],
            result["summary"],
        )
    return result


def register_webhook_retry_job(scheduler, interval_seconds: int = 60) -> str:
    """
    Registra el sweep de reintentos como job por intervalo.

    Args:
        scheduler: Instancia de SchedulerService
        interval_seconds: Segundos entre sweeps

    Returns:
        ID del job registrado
    """
    scheduler.add_interval_job(
        func=run_webhook_retry_sweep,
        job_id=JOB_ID,
        seconds=interval_seconds,
    )
    logger.info("[webhook_retry_job] Job '%s' registered: every %ds", JOB_ID, interval_seconds)
    return JOB_ID
