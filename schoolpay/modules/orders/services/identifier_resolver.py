# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/services/identifier_resolver.py

Resolución de una referencia libre (la que envía la pasarela o el cliente)
a una Order.

Las pasarelas devuelven la referencia bajo nombres inconsistentes y a veces
mandan su propio id opaco de transacción en lugar del que generamos. Por eso
se prueban varios campos candidatos, en este orden fijo:

    1. orders.custom_order_id
    2. metadata.collect_request_id
    3. metadata.collect_id
    4. metadata.transaction_id
    5. metadata.order_id          (alias genérico)
    6. orders.id                  (solo si la referencia es un UUID válido)

Lógicamente es un OR; el orden solo decide cuál gana si varias órdenes
coinciden, y se resuelve en una sola consulta (CASE en el ORDER BY).

Contrato:
- Cualquier entrada (None, vacía, no-string, basura) devuelve None, nunca
  lanza por la forma de la referencia.
- Errores del almacenamiento (SQLAlchemyError) sí se propagan: son fallas
  de persistencia y el ledger las registra como reintentables.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from schoolpay.modules.orders.models.order_models import (
    Order,
    METADATA_COLLECT_REQUEST_ID,
    METADATA_COLLECT_ID,
    METADATA_TRANSACTION_ID,
    METADATA_ORDER_ID,
)

logger = logging.getLogger(__name__)

MAX_REFERENCE_LENGTH = 255


@dataclass(frozen=True)
class LookupPredicate:
    """Un campo candidato: nombre (para logs) y constructor de la condición."""

    name: str
    build: Callable[[str], Optional[ColumnElement[bool]]]


def _metadata_equals(key: str) -> Callable[[str], ColumnElement[bool]]:
    def _build(reference: str) -> ColumnElement[bool]:
        return Order.order_metadata[key].as_string() == reference

    return _build


def _primary_key_equals(reference: str) -> Optional[ColumnElement[bool]]:
    try:
        pk = uuid.UUID(reference)
    except ValueError:
        return None
    return Order.id == pk


DEFAULT_LOOKUP_PREDICATES: tuple[LookupPredicate, ...] = (
    LookupPredicate("custom_order_id", lambda ref: Order.custom_order_id == ref),
    LookupPredicate("metadata.collect_request_id", _metadata_equals(METADATA_COLLECT_REQUEST_ID)),
    LookupPredicate("metadata.collect_id", _metadata_equals(METADATA_COLLECT_ID)),
    LookupPredicate("metadata.transaction_id", _metadata_equals(METADATA_TRANSACTION_ID)),
    LookupPredicate("metadata.order_id", _metadata_equals(METADATA_ORDER_ID)),
    LookupPredicate("primary_key", _primary_key_equals),
)


def clean_reference(reference: Any) -> Optional[str]:
    """Normaliza la referencia; None si no es utilizable."""
    if reference is None or isinstance(reference, bool):
        return None
    if isinstance(reference, (int, float)):
        reference = str(reference)
    if not isinstance(reference, str):
        return None
    cleaned = reference.strip()
    if not cleaned or len(cleaned) > MAX_REFERENCE_LENGTH:
        return None
    return cleaned


class IdentifierResolver:
    """Resuelve referencias libres a Order con una lista ordenada de predicados."""

    def __init__(self, predicates: Sequence[LookupPredicate] = DEFAULT_LOOKUP_PREDICATES) -> None:
        self.predicates = tuple(predicates)

    async def resolve(self, session: AsyncSession, reference: Any) -> Optional[Order]:
        ref = clean_reference(reference)
        if ref is None:
            logger.debug(f"Referencia no utilizable: {reference!r}")
            return None

        clauses = []
        for predicate in self.predicates:
            clause = predicate.build(ref)
            if clause is not None:
                clauses.append(clause)

        if not clauses:
            return None

        # Prioridad = posición del primer predicado que coincide
        priority = case(
            *[(clause, idx) for idx, clause in enumerate(clauses)],
            else_=len(clauses),
        )
        stmt = (
            select(Order)
            .where(or_(*clauses))
            .order_by(priority, Order.created_at.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        order = result.scalars().first()

        if order is None:
            logger.info(f"Orden no encontrada para referencia={ref}")
        else:
            logger.debug(f"Referencia {ref} resuelta a order_id={order.id}")
        return order


__all__ = [
    "IdentifierResolver",
    "LookupPredicate",
    "DEFAULT_LOOKUP_PREDICATES",
    "clean_reference",
]

# Fin del archivo backend/schoolpay/modules/orders/services/identifier_resolver.py
