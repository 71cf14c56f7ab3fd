# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/routes/status.py

Endpoint de estado de pago para polling del cliente.

- GET /payments/status/{reference}

Nunca responde 404: una referencia desconocida devuelve status=not_found.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.shared.database.database import get_async_session
from schoolpay.modules.payments.container import build_status_query_service
from schoolpay.modules.payments.facades.status import StatusQueryService
from schoolpay.modules.payments.schemas import StatusView

router = APIRouter(prefix="/payments", tags=["payments:status"])


@router.get(
    "/status/{reference}",
    response_model=StatusView,
    response_model_exclude_none=True,
)
async def get_payment_status(
    reference: str = Path(..., description="custom_order_id, id de la pasarela o UUID de la orden"),
    session: AsyncSession = Depends(get_async_session),
    query_service: StatusQueryService = Depends(build_status_query_service),
) -> StatusView:
    return await query_service.get_status(session, reference)

# Fin del archivo backend/schoolpay/modules/payments/routes/status.py
