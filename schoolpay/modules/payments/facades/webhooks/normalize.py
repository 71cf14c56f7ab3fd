# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/webhooks/normalize.py

Normalización de payloads de webhook de las pasarelas a un PaymentEvent canónico.

Cada forma (ver shapes.py) tiene su propia cadena de campos. Las cadenas de
montos toman el primer valor estrictamente positivo; la de modo de pago
prefiere la raíz sobre el objeto anidado y termina en "unknown".

Sin efectos secundarios: no toca base de datos ni red.

Autor: SchoolPay
Fecha: 2026-10-17
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from schoolpay.modules.payments.enums import PayloadShape
from schoolpay.shared.utils.datetime_helpers import parse_timestamp
from .shapes import (
    ClassifiedPayload,
    FlatLegacyPayload,
    NestedDataPayload,
    OrderInfoPayload,
    UnrecognizedPayloadError,
    WebhookNormalizationError,
    classify_payload,
    has_value,
)

logger = logging.getLogger(__name__)

UNKNOWN_PAYMENT_MODE = "unknown"
DEFAULT_EVENT_TYPE = "payment_update"
UNPARSED_BODY_KEY = "_unparsed_body"

DEFAULT_GATEWAY_BY_SHAPE: Dict[PayloadShape, str] = {
    PayloadShape.NESTED_DATA: "cashfree",
    PayloadShape.FLAT_LEGACY: "phonepe",
    PayloadShape.ORDER_INFO: "edviron",
}


class PaymentEvent(BaseModel):
    """
    Representación canónica y transitoria de una notificación de pago.

    Solo vive durante una pasada de conciliación.
    """

    shape: PayloadShape = Field(description="Forma del payload original")
    external_reference: str = Field(description="Referencia de la orden según la pasarela")
    gateway_status: Optional[str] = Field(default=None, description="Estado crudo de la pasarela")
    capture_status: Optional[str] = Field(default=None, description="Sub-estado de captura crudo")

    order_amount: Optional[Decimal] = Field(
        default=None,
        description="Monto de la orden según el payload (primer valor positivo de la cadena)",
    )
    transaction_amount: Optional[Decimal] = Field(
        default=None,
        description="Monto cobrado según el payload; cae al monto de la orden",
    )

    payment_mode: str = Field(default=UNKNOWN_PAYMENT_MODE)
    gateway_reference: Optional[str] = Field(
        default=None,
        description="Referencia nativa de la pasarela (bank reference / transaction id)",
    )
    payment_details: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = Field(default=None, description="Momento del pago (UTC)")
    gateway_name: str = Field(description="Pasarela origen")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Payload original completo")


# ---------------------------------------------------------------------------
# Helpers de extracción
# ---------------------------------------------------------------------------
def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Convierte un monto a Decimal estrictamente positivo.

    Devuelve None para booleanos, valores no numéricos, no finitos, cero
    o negativos.

    Examples:
        >>> parse_amount("500")
        Decimal('500')
        >>> parse_amount("abc") is None
        True
        >>> parse_amount(-1) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (dict, list, tuple, set)):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def resolve_amount(*candidates: Any) -> Optional[Decimal]:
    """Primer candidato que parsea a un monto positivo, o None."""
    for candidate in candidates:
        amount = parse_amount(candidate)
        if amount is not None:
            return amount
    return None


def _first(*candidates: Any) -> Optional[Any]:
    for candidate in candidates:
        if has_value(candidate):
            return candidate
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def resolve_payment_mode(root: Mapping[str, Any], nested: Mapping[str, Any]) -> str:
    """
    Cadena fija: raíz.payment_mode → anidado.payment_mode →
    raíz.payment_method → anidado.payment_method → "unknown".
    """
    mode = _first(
        root.get("payment_mode"),
        nested.get("payment_mode"),
        root.get("payment_method"),
        nested.get("payment_method"),
    )
    text = _as_text(mode)
    return text if text else UNKNOWN_PAYMENT_MODE


def _require_reference(candidate: Any, shape: PayloadShape) -> str:
    reference = _as_text(candidate)
    if not reference:
        raise UnrecognizedPayloadError(
            f"Webhook payload of shape '{shape}' carries no order reference"
        )
    return reference


# ---------------------------------------------------------------------------
# Extractores por forma
# ---------------------------------------------------------------------------
def _from_nested_data(payload: NestedDataPayload) -> PaymentEvent:
    root, data = payload.root, payload.data

    order_amount = resolve_amount(data.get("order_amount"), data.get("amount"), root.get("amount"))
    transaction_amount = resolve_amount(data.get("payment_amount"), data.get("transaction_amount"))

    return PaymentEvent(
        shape=payload.shape,
        external_reference=_require_reference(
            _first(data.get("order_id"), root.get("collect_request_id")),
            payload.shape,
        ),
        gateway_status=_as_text(_first(data.get("payment_status"), data.get("status"))),
        capture_status=_as_text(data.get("capture_status")),
        order_amount=order_amount,
        transaction_amount=transaction_amount or order_amount,
        payment_mode=resolve_payment_mode(root, data),
        gateway_reference=_as_text(_first(data.get("cf_payment_id"), data.get("bank_reference"))),
        payment_details=_as_text(data.get("payment_details")),
        message=_as_text(_first(data.get("payment_message"), root.get("type"))),
        error=_as_text(_first(data.get("failure_reason"), data.get("error_message"))),
        timestamp=parse_timestamp(_first(data.get("payment_completion_time"), data.get("payment_time"))),
        gateway_name=_as_text(data.get("gateway")) or DEFAULT_GATEWAY_BY_SHAPE[payload.shape],
        raw=dict(root),
    )


def _from_flat_legacy(payload: FlatLegacyPayload) -> PaymentEvent:
    root = payload.root

    order_amount = resolve_amount(root.get("amount"), root.get("order_amount"))
    transaction_amount = resolve_amount(root.get("transaction_amount"), root.get("amount"))

    return PaymentEvent(
        shape=payload.shape,
        external_reference=_require_reference(
            _first(root.get("collect_request_id"), root.get("order_id")),
            payload.shape,
        ),
        gateway_status=_as_text(root.get("status")),
        capture_status=_as_text(root.get("capture_status")),
        order_amount=order_amount,
        transaction_amount=transaction_amount or order_amount,
        payment_mode=resolve_payment_mode(root, {}),
        gateway_reference=_as_text(_first(root.get("transaction_id"), root.get("bank_reference"))),
        payment_details=_as_text(root.get("payment_details")),
        message=_as_text(_first(root.get("message"), root.get("payment_message"))),
        error=_as_text(_first(root.get("error"), root.get("error_message"))),
        timestamp=parse_timestamp(root.get("payment_time")),
        gateway_name=(
            _as_text(_first(root.get("gateway"), root.get("payment_gateway")))
            or DEFAULT_GATEWAY_BY_SHAPE[payload.shape]
        ),
        raw=dict(root),
    )


def _from_order_info(payload: OrderInfoPayload) -> PaymentEvent:
    root, info = payload.root, payload.order_info

    order_amount = resolve_amount(info.get("order_amount"), info.get("amount"))
    transaction_amount = resolve_amount(info.get("transaction_amount"), info.get("amount"))

    return PaymentEvent(
        shape=payload.shape,
        external_reference=_require_reference(
            _first(info.get("order_id"), info.get("collect_request_id")),
            payload.shape,
        ),
        gateway_status=_as_text(info.get("status")),
        capture_status=_as_text(info.get("capture_status")),
        order_amount=order_amount,
        transaction_amount=transaction_amount or order_amount,
        payment_mode=resolve_payment_mode(root, info),
        gateway_reference=_as_text(_first(info.get("bank_reference"), info.get("transaction_id"))),
        # `payemnt_details` es un nombre legacy mal escrito que aún envían
        payment_details=_as_text(_first(info.get("payment_details"), info.get("payemnt_details"))),
        message=_as_text(_first(info.get("payment_message"), info.get("Payment_message"))),
        error=_as_text(info.get("error_message")),
        timestamp=parse_timestamp(info.get("payment_time")),
        gateway_name=_as_text(info.get("gateway")) or DEFAULT_GATEWAY_BY_SHAPE[payload.shape],
        raw=dict(root),
    )


def event_from_classified(payload: ClassifiedPayload) -> PaymentEvent:
    if isinstance(payload, NestedDataPayload):
        return _from_nested_data(payload)
    if isinstance(payload, FlatLegacyPayload):
        return _from_flat_legacy(payload)
    if isinstance(payload, OrderInfoPayload):
        return _from_order_info(payload)
    raise UnrecognizedPayloadError(f"Unsupported payload variant: {type(payload).__name__}")


# ---------------------------------------------------------------------------
# API pública
# ---------------------------------------------------------------------------
def normalize_payload(
    body: Any,
    headers: Optional[Mapping[str, str]] = None,
) -> PaymentEvent:
    """
    Normaliza un body de webhook ya decodificado a PaymentEvent.

    Los headers se aceptan para auditoría; no alteran la extracción.

    Raises:
        UnrecognizedPayloadError: forma desconocida o sin referencia de orden
    """
    classified = classify_payload(body)
    event = event_from_classified(classified)

    logger.debug(
        f"Webhook normalizado: shape={event.shape}, reference={event.external_reference}, "
        f"gateway_status={event.gateway_status}, gateway={event.gateway_name}"
    )
    return event


def decode_webhook_body(raw_body: bytes) -> Any:
    """
    Decodifica el body crudo.

    Un body que no es JSON no se descarta: se guarda como
    {"_unparsed_body": <texto>} para que quede en el ledger y falle
    después como forma no reconocida.
    """
    text = raw_body.decode("utf-8", errors="replace")
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Webhook con body no-JSON; se registra sin parsear")
        return {UNPARSED_BODY_KEY: text}


def extract_event_type(body: Any) -> str:
    if isinstance(body, Mapping):
        event_type = _as_text(body.get("type")) or _as_text(body.get("event_type"))
        if event_type:
            return event_type[:128]
    return DEFAULT_EVENT_TYPE


__all__ = [
    "PaymentEvent",
    "WebhookNormalizationError",
    "UnrecognizedPayloadError",
    "normalize_payload",
    "event_from_classified",
    "parse_amount",
    "resolve_amount",
    "resolve_payment_mode",
    "decode_webhook_body",
    "extract_event_type",
    "UNKNOWN_PAYMENT_MODE",
    "DEFAULT_EVENT_TYPE",
]
# Fin del archivo
