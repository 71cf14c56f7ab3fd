# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/__init__.py

Módulos de dominio: orders (intake de órdenes) y payments (conciliación).
"""
