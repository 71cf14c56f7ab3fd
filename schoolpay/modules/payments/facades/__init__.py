# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/__init__.py

Fachadas del módulo Payments:
- webhooks: normalización y manejo del webhook entrante
- reconciliation: lattice y motor de conciliación
- status: consulta de estado para el cliente
"""
