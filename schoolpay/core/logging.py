# -*- coding: utf-8 -*-
"""
backend/schoolpay/core/logging.py

Fachada de `schoolpay.shared.config.logging_config`.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from schoolpay.shared.config.logging_config import LogLevel, build_logging_config, setup_logging

__all__ = ["LogLevel", "build_logging_config", "setup_logging"]

# Fin del archivo backend/schoolpay/core/logging.py
