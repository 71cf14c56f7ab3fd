# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/__init__.py

Infraestructura compartida: configuración, base de datos, scheduler y utilidades.
"""

# Fin del archivo
