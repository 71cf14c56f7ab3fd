# backend/tests/shared/test_scheduler_jobs.py
# -*- coding: utf-8 -*-
"""
SchedulerService y job del sweep de reintentos.

El scheduler se arranca dentro del loop del test; los intervalos son
largos para que ningún job llegue a ejecutarse.
"""

import pytest

from schoolpay.shared.scheduler.scheduler_service import SchedulerService
from schoolpay.shared.scheduler.jobs import (
    JOB_ID,
    register_webhook_retry_job,
    run_webhook_retry_sweep,
)


@pytest.fixture
async def scheduler():
    service = SchedulerService()
    service.start()
    yield service
    service.shutdown(wait=False)


async def test_register_webhook_retry_job(scheduler):
    job_id = register_webhook_retry_job(scheduler, interval_seconds=600)

    assert job_id == JOB_ID
    status = scheduler.get_job_status(JOB_ID)
    assert status is not None
    assert status["max_instances"] == 1
    assert status["next_run"] is not None
    assert [job["id"] for job in scheduler.get_jobs()] == [JOB_ID]


async def test_register_replaces_existing_job(scheduler):
    register_webhook_retry_job(scheduler, interval_seconds=600)
    register_webhook_retry_job(scheduler, interval_seconds=900)

    jobs = scheduler.get_jobs()
    assert len(jobs) == 1
    assert "0:15:00" in jobs[0]["trigger"]


async def test_remove_job(scheduler):
    register_webhook_retry_job(scheduler, interval_seconds=600)

    assert scheduler.remove_job(JOB_ID) is True
    assert scheduler.remove_job(JOB_ID) is False
    assert scheduler.get_job_status(JOB_ID) is None


async def test_start_and_shutdown_flags():
    service = SchedulerService()
    assert service.is_running is False

    service.start()
    assert service.is_running is True

    service.shutdown(wait=False)
    assert service.is_running is False


def test_non_positive_interval_is_rejected():
    with pytest.raises(ValueError):
        register_webhook_retry_job(SchedulerService(), interval_seconds=0)


async def test_sweep_job_never_raises(monkeypatch):
    class _BrokenService:
        async def retry_failed_webhooks(self):
            raise RuntimeError("db down")

    monkeypatch.setattr(
        "schoolpay.modules.payments.container.get_retry_service",
        lambda: _BrokenService(),
    )

    result = await run_webhook_retry_sweep()

    assert result == {"error": "db down", "processed": 0}

# Fin del archivo backend/tests/shared/test_scheduler_jobs.py
