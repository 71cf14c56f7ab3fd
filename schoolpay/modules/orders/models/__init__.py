# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/models/__init__.py
"""

from .order_models import Order, generate_custom_order_id

__all__ = ["Order", "generate_custom_order_id"]
