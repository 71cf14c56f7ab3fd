# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/__init__.py

Módulo Orders: modelo de orden, repositorio y resolución de referencias.

La creación de órdenes vive fuera de este backend; aquí solo se leen
órdenes y se refresca su caché de metadata.
"""
