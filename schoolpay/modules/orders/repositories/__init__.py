# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/repositories/__init__.py
"""

from .order_repository import OrderRepository

__all__ = ["OrderRepository"]
