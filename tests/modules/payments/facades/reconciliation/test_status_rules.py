# backend/tests/modules/payments/facades/reconciliation/test_status_rules.py
# -*- coding: utf-8 -*-
"""
Lattice de estados: mapeo de estados crudos y guardia de transición.
"""

import pytest

from schoolpay.modules.payments.enums import PaymentStatus
from schoolpay.modules.payments.facades.reconciliation import is_transition_allowed, map_gateway_status


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("SUCCESS", PaymentStatus.SUCCESS),
        ("completed", PaymentStatus.SUCCESS),
        (" Paid ", PaymentStatus.SUCCESS),
        ("FAILED", PaymentStatus.FAILED),
        ("declined", PaymentStatus.FAILED),
        ("ERROR", PaymentStatus.FAILED),
        ("USER_DROPPED", PaymentStatus.CANCELLED),
        ("cancelled", PaymentStatus.CANCELLED),
        ("CANCELED", PaymentStatus.CANCELLED),
        ("PENDING", PaymentStatus.PENDING),
        ("NOT_ATTEMPTED", PaymentStatus.PENDING),
        ("", PaymentStatus.PENDING),
        (None, PaymentStatus.PENDING),
        (200, PaymentStatus.PENDING),
    ],
)
def test_map_gateway_status(raw, expected):
    assert map_gateway_status(raw) == expected


def test_capture_status_does_not_change_mapping():
    assert map_gateway_status("SUCCESS", "PENDING") == PaymentStatus.SUCCESS
    assert map_gateway_status("PENDING", "SUCCESS") == PaymentStatus.PENDING


def test_transition_allowed_from_absent_or_pending():
    for new in PaymentStatus:
        assert is_transition_allowed(None, new)
        assert is_transition_allowed(PaymentStatus.PENDING, new)


@pytest.mark.parametrize("old", [PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.CANCELLED])
def test_terminal_states_never_transition(old):
    for new in PaymentStatus:
        assert not is_transition_allowed(old, new)


def test_transition_guard_accepts_raw_strings():
    assert is_transition_allowed("pending", "success")
    assert not is_transition_allowed("success", "failed")

# Fin del archivo backend/tests/modules/payments/facades/reconciliation/test_status_rules.py
