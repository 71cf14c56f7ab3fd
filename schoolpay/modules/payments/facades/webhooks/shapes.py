# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/webhooks/shapes.py

Clasificación de payloads de webhook en una unión etiquetada de tres formas.

Orden de clasificación (la primera que aplica gana):
    A) `data` es un objeto                          → NestedDataPayload
    B) `order_id` o `collect_request_id` en la raíz → FlatLegacyPayload
    C) `order_info` es un objeto                    → OrderInfoPayload
Cualquier otra cosa se rechaza con UnrecognizedPayloadError.

La clasificación solo mira qué campos existen; no coerciona valores.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from schoolpay.modules.payments.enums import PayloadShape


class WebhookNormalizationError(ValueError):
    """Error al normalizar un webhook."""
    pass


class UnrecognizedPayloadError(WebhookNormalizationError):
    """El payload no coincide con ninguna forma conocida (o no trae referencia)."""
    pass


@dataclass(frozen=True)
class NestedDataPayload:
    root: Mapping[str, Any]
    data: Mapping[str, Any]
    shape: Literal[PayloadShape.NESTED_DATA] = field(default=PayloadShape.NESTED_DATA, init=False)


@dataclass(frozen=True)
class FlatLegacyPayload:
    root: Mapping[str, Any]
    shape: Literal[PayloadShape.FLAT_LEGACY] = field(default=PayloadShape.FLAT_LEGACY, init=False)


@dataclass(frozen=True)
class OrderInfoPayload:
    root: Mapping[str, Any]
    order_info: Mapping[str, Any]
    shape: Literal[PayloadShape.ORDER_INFO] = field(default=PayloadShape.ORDER_INFO, init=False)


ClassifiedPayload = Union[NestedDataPayload, FlatLegacyPayload, OrderInfoPayload]


def has_value(value: Any) -> bool:
    """True si el valor existe y no es una cadena vacía."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def classify_payload(body: Any) -> ClassifiedPayload:
    """
    Clasifica un body JSON ya decodificado.

    Raises:
        UnrecognizedPayloadError: si no es un objeto o no coincide con ninguna forma
    """
    if not isinstance(body, Mapping):
        raise UnrecognizedPayloadError(
            f"Unrecognized webhook payload: expected a JSON object, got {type(body).__name__}"
        )

    data = body.get("data")
    if isinstance(data, Mapping):
        return NestedDataPayload(root=body, data=data)

    if has_value(body.get("order_id")) or has_value(body.get("collect_request_id")):
        return FlatLegacyPayload(root=body)

    order_info = body.get("order_info")
    if isinstance(order_info, Mapping):
        return OrderInfoPayload(root=body, order_info=order_info)

    keys = ", ".join(sorted(str(k) for k in body.keys())[:10]) or "<empty>"
    raise UnrecognizedPayloadError(
        "Unrecognized webhook payload: expected one of 'data', "
        f"'order_id'/'collect_request_id' or 'order_info' (keys: {keys})"
    )


__all__ = [
    "WebhookNormalizationError",
    "UnrecognizedPayloadError",
    "NestedDataPayload",
    "FlatLegacyPayload",
    "OrderInfoPayload",
    "ClassifiedPayload",
    "classify_payload",
    "has_value",
]

# Fin del archivo backend/schoolpay/modules/payments/facades/webhooks/shapes.py
