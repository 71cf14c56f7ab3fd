# -*- coding: utf-8 -*-
"""
backend/schoolpay/__init__.py

Paquete principal del backend de conciliación de pagos escolares.

Los módulos internos se importan como 'schoolpay.*'.

Autor: SchoolPay
Fecha: 2026-10-17
"""

# Fin del archivo backend/schoolpay/__init__.py
