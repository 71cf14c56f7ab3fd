# backend/tests/modules/payments/facades/webhooks/test_normalize_payload.py
# -*- coding: utf-8 -*-
"""
Clasificación de formas y normalización a PaymentEvent.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from schoolpay.modules.payments.enums import PayloadShape
from schoolpay.modules.payments.facades.webhooks import (
    FlatLegacyPayload,
    NestedDataPayload,
    OrderInfoPayload,
    UnrecognizedPayloadError,
    WebhookNormalizationError,
    classify_payload,
    decode_webhook_body,
    extract_event_type,
    normalize_payload,
    parse_amount,
)


# ---------------------------------------------------------------------------
# Clasificación
# ---------------------------------------------------------------------------
def test_classify_nested_data_wins_over_root_order_id():
    body = {"order_id": "ORD_1", "data": {"order_id": "ORD_2"}}
    assert isinstance(classify_payload(body), NestedDataPayload)


def test_classify_flat_legacy_by_collect_request_id():
    classified = classify_payload({"collect_request_id": "CR_1", "status": "SUCCESS"})
    assert isinstance(classified, FlatLegacyPayload)
    assert classified.shape == PayloadShape.FLAT_LEGACY


def test_classify_order_info_envelope():
    classified = classify_payload({"status": 200, "order_info": {"order_id": "ORD_1"}})
    assert isinstance(classified, OrderInfoPayload)


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"foo": "bar"},
        {"data": "not-an-object"},
        {"order_id": "   "},
        ["ORD_1"],
        "ORD_1",
        None,
    ],
)
def test_classify_rejects_unknown_shapes(body):
    with pytest.raises(UnrecognizedPayloadError):
        classify_payload(body)


def test_unrecognized_is_a_normalization_error():
    assert issubclass(UnrecognizedPayloadError, WebhookNormalizationError)
    assert issubclass(WebhookNormalizationError, ValueError)


# ---------------------------------------------------------------------------
# Extracción por forma
# ---------------------------------------------------------------------------
def test_nested_data_extraction():
    event = normalize_payload(
        {
            "type": "PAYMENT_SUCCESS_WEBHOOK",
            "payment_mode": "upi",
            "data": {
                "order_id": "ORD_1",
                "payment_status": "SUCCESS",
                "status": "IGNORED",
                "amount": "500",
                "payment_amount": "500.00",
                "cf_payment_id": "CF_9",
                "payment_mode": "card",
                "payment_completion_time": "2026-10-17T10:00:00Z",
            },
        }
    )

    assert event.shape == PayloadShape.NESTED_DATA
    assert event.external_reference == "ORD_1"
    assert event.gateway_status == "SUCCESS"
    assert event.order_amount == Decimal("500")
    assert event.transaction_amount == Decimal("500.00")
    # la raíz tiene prioridad sobre data
    assert event.payment_mode == "upi"
    assert event.gateway_reference == "CF_9"
    assert event.message == "PAYMENT_SUCCESS_WEBHOOK"
    assert event.timestamp == datetime(2026, 10, 17, 10, 0, tzinfo=timezone.utc)
    assert event.gateway_name == "cashfree"


def test_nested_data_reference_falls_back_to_root_collect_request_id():
    event = normalize_payload({"collect_request_id": "CR_7", "data": {"status": "PENDING"}})
    assert event.external_reference == "CR_7"
    assert event.gateway_status == "PENDING"


def test_flat_legacy_extraction():
    event = normalize_payload(
        {
            "collect_request_id": "CR_1",
            "order_id": "ORD_1",
            "status": "FAILED",
            "amount": 250,
            "transaction_id": "TXN_1",
            "payment_method": "netbanking",
            "error": "Insufficient funds",
            "payment_gateway": "razorpay",
        }
    )

    assert event.shape == PayloadShape.FLAT_LEGACY
    assert event.external_reference == "CR_1"
    assert event.gateway_status == "FAILED"
    assert event.order_amount == Decimal("250")
    assert event.transaction_amount == Decimal("250")
    assert event.payment_mode == "netbanking"
    assert event.gateway_reference == "TXN_1"
    assert event.error == "Insufficient funds"
    assert event.gateway_name == "razorpay"


def test_order_info_extraction_with_legacy_alias():
    event = normalize_payload(
        {
            "status": 200,
            "order_info": {
                "order_id": "ORD_3",
                "status": "success",
                "order_amount": 1000,
                "transaction_amount": 1020,
                "payment_mode": "upi",
                "payemnt_details": "success@ybl",
                "bank_reference": "YESBNK222",
                "Payment_message": "payment success",
                "payment_time": "2026-10-17T08:14:21.945+00:00",
            },
        }
    )

    assert event.shape == PayloadShape.ORDER_INFO
    assert event.external_reference == "ORD_3"
    assert event.order_amount == Decimal("1000")
    assert event.transaction_amount == Decimal("1020")
    assert event.payment_details == "success@ybl"
    assert event.gateway_reference == "YESBNK222"
    assert event.message == "payment success"
    assert event.gateway_name == "edviron"
    assert event.raw["status"] == 200


def test_payment_mode_defaults_to_unknown():
    event = normalize_payload({"order_id": "ORD_1", "status": "SUCCESS"})
    assert event.payment_mode == "unknown"


def test_known_shape_without_reference_is_rejected():
    with pytest.raises(UnrecognizedPayloadError):
        normalize_payload({"data": {"status": "SUCCESS"}})


def test_equivalent_content_normalizes_equally_across_shapes():
    """Mismo contenido semántico en las tres formas → mismo estado, monto y modo."""
    nested = normalize_payload(
        {"data": {"order_id": "ORD_1", "payment_status": "SUCCESS", "amount": "500", "payment_mode": "upi"}}
    )
    flat = normalize_payload({"order_id": "ORD_1", "status": "SUCCESS", "amount": "500", "payment_mode": "upi"})
    info = normalize_payload(
        {"order_info": {"order_id": "ORD_1", "status": "SUCCESS", "amount": "500", "payment_mode": "upi"}}
    )

    for event in (nested, flat, info):
        assert event.external_reference == "ORD_1"
        assert event.gateway_status == "SUCCESS"
        assert event.order_amount == Decimal("500")
        assert event.transaction_amount == Decimal("500")
        assert event.payment_mode == "upi"


# ---------------------------------------------------------------------------
# Montos
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("500", Decimal("500")),
        (" 12.50 ", Decimal("12.50")),
        (99, Decimal("99")),
        ("abc", None),
        ("", None),
        (0, None),
        ("-3", None),
        ("NaN", None),
        ("Infinity", None),
        (True, None),
        ({"amount": 1}, None),
        (None, None),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_amount_fallback_skips_non_numeric_field():
    event = normalize_payload({"data": {"order_id": "ORD_1", "order_amount": "N/A", "amount": "750"}})
    assert event.order_amount == Decimal("750")


def test_amount_absent_everywhere_is_none():
    event = normalize_payload({"order_id": "ORD_1", "status": "PENDING", "amount": "0"})
    assert event.order_amount is None
    assert event.transaction_amount is None


# ---------------------------------------------------------------------------
# Body crudo y tipo de evento
# ---------------------------------------------------------------------------
def test_decode_webhook_body_variants():
    assert decode_webhook_body(b'{"order_id": "ORD_1"}') == {"order_id": "ORD_1"}
    assert decode_webhook_body(b"   ") == {}
    assert decode_webhook_body(b"not json") == {"_unparsed_body": "not json"}


def test_extract_event_type():
    assert extract_event_type({"type": "PAYMENT_SUCCESS_WEBHOOK"}) == "PAYMENT_SUCCESS_WEBHOOK"
    assert extract_event_type({"event_type": "refund"}) == "refund"
    assert extract_event_type({"order_id": "x"}) == "payment_update"
    assert extract_event_type(["x"]) == "payment_update"

# Fin del archivo backend/tests/modules/payments/facades/webhooks/test_normalize_payload.py
