# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/scheduler/jobs/__init__.py

Jobs programados del sistema.
"""

from .webhook_retry_job import JOB_ID, run_webhook_retry_sweep, register_webhook_retry_job

__all__ = [
    "JOB_ID",
    "run_webhook_retry_sweep",
    "register_webhook_retry_job",
]
