# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/__init__.py

Módulo Payments: normalización de webhooks, lattice de estados,
conciliación, ledger de auditoría/reintentos y consulta de estado.
"""
