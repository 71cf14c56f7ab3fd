# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/metrics/__init__.py

Métricas Prometheus del módulo de pagos (exporter + rutas).
"""
