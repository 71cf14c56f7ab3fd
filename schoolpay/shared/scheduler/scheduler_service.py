# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/scheduler/scheduler_service.py

Servicio de programación de tareas periódicas usando APScheduler.

Cada job corre con max_instances=1: dos ejecuciones del mismo job nunca
se solapan dentro del proceso (el sweep de reintentos depende de esto).

Autor: SchoolPay
Fecha: 2026-10-17
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Servicio de programación de tareas periódicas.

    - Jobs por intervalo, registro y eliminación dinámica
    - Logging de altas/bajas
    """

    def __init__(self, misfire_grace_time: int = 30):
        job_defaults = {
            'coalesce': True,  # Combinar ejecuciones perdidas
            'max_instances': 1,  # Una instancia por job
            'misfire_grace_time': misfire_grace_time,
        }

        self._scheduler = AsyncIOScheduler(
            jobstores={'default': MemoryJobStore()},
            executors={'default': AsyncIOExecutor()},
            job_defaults=job_defaults,
            timezone='UTC',
        )
        self._started = False
        logger.info("SchedulerService inicializado")

    def start(self) -> None:
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("SchedulerService iniciado")

    def shutdown(self, wait: bool = True) -> None:
        """
        Detiene el scheduler.

        Args:
            wait: Si True, espera a que terminen los jobs en ejecución
        """
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("SchedulerService detenido")

    def add_interval_job(
        self,
        func: Callable,
        job_id: str,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        **kwargs: Any,
    ) -> str:
        """
        Agrega (o reemplaza) un job que se ejecuta a intervalos regulares.

        Args:
            func: Función (sync o async) a ejecutar
            job_id: ID único del job
            hours / minutes / seconds: Intervalo
            **kwargs: Argumentos para func

        Returns:
            ID del job agregado
        """
        if hours <= 0 and minutes <= 0 and seconds <= 0:
            raise ValueError(f"Intervalo inválido para job '{job_id}'")

        trigger = IntervalTrigger(hours=hours, minutes=minutes, seconds=seconds)

        self._scheduler.add_job(
            func=func,
            trigger=trigger,
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )

        logger.info(f"Job '{job_id}' agregado: cada {hours}h {minutes}m {seconds}s")
        return job_id

    def remove_job(self, job_id: str) -> bool:
        """Elimina un job programado; False si no existía."""
        if self._scheduler.get_job(job_id) is None:
            logger.warning(f"No se pudo eliminar job '{job_id}': no existe")
            return False
        self._scheduler.remove_job(job_id)
        logger.info(f"Job '{job_id}' eliminado")
        return True

    def get_jobs(self) -> List[Dict[str, Any]]:
        return [
            {
                'id': job.id,
                'name': job.name,
                'next_run': job.next_run_time,
                'trigger': str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]

    def get_job_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        job = self._scheduler.get_job(job_id)
        if job is None:
            return None
        return {
            'id': job.id,
            'name': job.name,
            'next_run': job.next_run_time,
            'trigger': str(job.trigger),
            'max_instances': job.max_instances,
        }

    @property
    def is_running(self) -> bool:
        """Retorna True si el scheduler está activo."""
        return self._started and self._scheduler.running


# Singleton global del scheduler
_scheduler_instance: Optional[SchedulerService] = None


def get_scheduler() -> SchedulerService:
    """Obtiene la instancia global del scheduler (singleton)."""
    global _scheduler_instance
    if _scheduler_instance is None:
        _scheduler_instance = SchedulerService()
    return _scheduler_instance


# Fin del archivo backend/schoolpay/shared/scheduler/scheduler_service.py
