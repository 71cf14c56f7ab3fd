# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/payments/facades/webhooks/__init__.py

Clasificación y normalización de payloads de webhook.
El handler se importa desde su módulo (depende de reconciliation).
"""
from .shapes import (
    WebhookNormalizationError,
    UnrecognizedPayloadError,
    NestedDataPayload,
    FlatLegacyPayload,
    OrderInfoPayload,
    ClassifiedPayload,
    classify_payload,
)
from .normalize import (
    PaymentEvent,
    normalize_payload,
    decode_webhook_body,
    extract_event_type,
    parse_amount,
    resolve_amount,
)

__all__ = [
    "WebhookNormalizationError",
    "UnrecognizedPayloadError",
    "NestedDataPayload",
    "FlatLegacyPayload",
    "OrderInfoPayload",
    "ClassifiedPayload",
    "classify_payload",
    "PaymentEvent",
    "normalize_payload",
    "decode_webhook_body",
    "extract_event_type",
    "parse_amount",
    "resolve_amount",
]
