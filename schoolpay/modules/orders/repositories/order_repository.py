# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/repositories/order_repository.py

Repositorio para la tabla orders.

Responsabilidades:
- Alta de órdenes (intake externo, seeds y pruebas)
- Refresco de la caché de metadata (único campo que escribe la conciliación)

Autor: SchoolPay
Fecha: 2026-10-17
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.database.repository import BaseRepository
from schoolpay.modules.orders.models.order_models import Order, generate_custom_order_id


class OrderRepository(BaseRepository[Order]):
    def __init__(self) -> None:
        super().__init__(Order)

    # -----------------------------------------------------------
    # Alta
    # -----------------------------------------------------------
    async def create_order(
        self,
        session: AsyncSession,
        *,
        school_id: str,
        amount: Optional[Decimal] = None,
        student_info: Optional[Dict[str, Any]] = None,
        gateway_name: str = "edviron",
        trustee_id: Optional[str] = None,
        order_metadata: Optional[Dict[str, Any]] = None,
        custom_order_id: Optional[str] = None,
    ) -> Order:
        return await self.create(
            session,
            custom_order_id=custom_order_id or generate_custom_order_id(),
            school_id=school_id,
            trustee_id=trustee_id,
            amount=amount,
            student_info=dict(student_info or {}),
            gateway_name=gateway_name,
            order_metadata=dict(order_metadata or {}),
        )

    # -----------------------------------------------------------
    # Metadata
    # -----------------------------------------------------------
    async def merge_metadata(
        self,
        session: AsyncSession,
        order: Order,
        updates: Mapping[str, Any],
    ) -> Order:
        """
        Fusiona `updates` sobre la metadata actual y hace flush.

        Se reasigna el dict completo: la columna JSON no rastrea
        mutaciones in-place.
        """
        merged = dict(order.order_metadata or {})
        merged.update({k: v for k, v in updates.items() if v is not None})
        order.order_metadata = merged
        await session.flush()
        return order

# Fin del archivo backend/schoolpay/modules/orders/repositories/order_repository.py
