# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/enums/payload_shape_enum.py

Formas conocidas de payload de webhook.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from enum import StrEnum


class PayloadShape(StrEnum):
    NESTED_DATA = "nested_data"  # estado y montos bajo `data` (Cashfree)
    FLAT_LEGACY = "flat_legacy"  # campos en la raíz (PhonePe / legacy)
    ORDER_INFO = "order_info"  # sobre `order_info`


__all__ = ["PayloadShape"]

# Fin del archivo backend/schoolpay/modules/payments/enums/payload_shape_enum.py
