# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/scheduler/__init__.py

Sistema de jobs programados usando APScheduler.
"""

from .scheduler_service import SchedulerService, get_scheduler

__all__ = [
    "SchedulerService",
    "get_scheduler",
]
