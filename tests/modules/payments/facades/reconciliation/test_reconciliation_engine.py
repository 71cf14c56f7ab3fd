# backend/tests/modules/payments/facades/reconciliation/test_reconciliation_engine.py
# -*- coding: utf-8 -*-
"""
Motor de conciliación sobre SQLite async:
- escenario ORD_1 (SUCCESS y luego PENDING rezagado)
- idempotencia y monotonicidad
- orden no encontrada
- cadena de montos hasta el monto de la orden
- refresco de metadata
- upsert atómico ante un terminal concurrente
"""

from decimal import Decimal

import pytest

from schoolpay.modules.orders.repositories import OrderRepository
from schoolpay.modules.orders.services import IdentifierResolver
from schoolpay.modules.payments.enums import PaymentStatus
from schoolpay.modules.payments.facades.reconciliation import (
    ReconcileOutcome,
    ReconciliationEngine,
)
from schoolpay.modules.payments.repositories import PaymentRecordRepository


def _nested(reference, status, **data):
    return {"data": {"order_id": reference, "payment_status": status, **data}}


@pytest.fixture
def recon():
    return ReconciliationEngine(
        resolver=IdentifierResolver(),
        record_repo=PaymentRecordRepository(),
        order_repo=OrderRepository(),
    )


@pytest.fixture
def apply(recon, session_factory):
    """Aplica un payload en su propia sesión/transacción."""

    async def _apply(body):
        async with session_factory() as session:
            event, result = await recon.reconcile_payload(session, body)
            await session.commit()
            return result

    return _apply


@pytest.fixture
def load_record(session_factory):
    async def _load(order_id):
        async with session_factory() as session:
            return await PaymentRecordRepository().get_by_order_id(session, order_id)

    return _load


async def test_success_then_stale_pending_keeps_success(make_order, apply, load_record):
    order = await make_order(custom_order_id="ORD_1")

    first = await apply(_nested("ORD_1", "SUCCESS", amount="500"))
    assert first.outcome == ReconcileOutcome.UPDATED
    assert first.status == PaymentStatus.SUCCESS
    assert first.previous_status is None

    record = await load_record(order.id)
    assert record.status == PaymentStatus.SUCCESS
    assert record.order_amount == Decimal("500")

    second = await apply(_nested("ORD_1", "PENDING"))
    assert second.outcome == ReconcileOutcome.UNCHANGED
    assert second.status == PaymentStatus.SUCCESS
    assert second.to_order_summary()["previousStatus"] == "success"

    record = await load_record(order.id)
    assert record.status == PaymentStatus.SUCCESS
    assert record.order_amount == Decimal("500")


async def test_replaying_same_payload_is_idempotent(make_order, apply, load_record):
    order = await make_order(custom_order_id="ORD_IDEM")
    body = _nested("ORD_IDEM", "PENDING", amount="120", cf_payment_id="CF_1")

    await apply(body)
    once = await load_record(order.id)
    snapshot = (once.status, once.order_amount, once.transaction_amount, once.bank_reference, once.payment_mode)

    for _ in range(3):
        await apply(body)

    again = await load_record(order.id)
    assert (again.status, again.order_amount, again.transaction_amount, again.bank_reference, again.payment_mode) == snapshot
    assert again.id == once.id


@pytest.mark.parametrize("later", ["FAILED", "CANCELLED", "PENDING", "SUCCESS"])
async def test_terminal_status_is_never_overwritten(make_order, apply, load_record, later):
    order = await make_order(custom_order_id="ORD_MONO")
    await apply(_nested("ORD_MONO", "SUCCESS", amount="80"))

    result = await apply(_nested("ORD_MONO", later, amount="999"))

    assert result.previous_status == PaymentStatus.SUCCESS
    record = await load_record(order.id)
    assert record.status == PaymentStatus.SUCCESS
    assert record.order_amount == Decimal("80")


async def test_pending_advances_to_terminal(make_order, apply, load_record):
    order = await make_order(custom_order_id="ORD_ADV")
    await apply(_nested("ORD_ADV", "PENDING", amount="40"))

    result = await apply(_nested("ORD_ADV", "FAILED", failure_reason="Card declined"))

    assert result.outcome == ReconcileOutcome.UPDATED
    assert result.previous_status == PaymentStatus.PENDING
    record = await load_record(order.id)
    assert record.status == PaymentStatus.FAILED
    assert record.error_message == "Card declined"
    assert record.payment_time is not None


async def test_unknown_reference_is_order_not_found(apply):
    result = await apply(_nested("ORD_MISSING", "SUCCESS"))

    assert result.outcome == ReconcileOutcome.ORDER_NOT_FOUND
    assert not result.order_found
    assert result.to_order_summary()["status"] == "order_not_found"
    assert result.to_order_summary()["providerReference"] == "ORD_MISSING"


async def test_amount_falls_back_to_order_amount_then_zero(make_order, apply, load_record):
    with_amount = await make_order(custom_order_id="ORD_AMT", amount="300")
    without_amount = await make_order(custom_order_id="ORD_ZERO")

    await apply(_nested("ORD_AMT", "SUCCESS", amount="abc"))
    await apply(_nested("ORD_ZERO", "SUCCESS"))

    record = await load_record(with_amount.id)
    assert record.order_amount == Decimal("300")
    assert record.transaction_amount == Decimal("300")

    record = await load_record(without_amount.id)
    assert record.order_amount == Decimal("0")


async def test_follow_up_without_amount_keeps_cached_amount(
    make_order, apply, load_record, session_factory
):
    order = await make_order(custom_order_id="ORD_CACHED")

    await apply(_nested("ORD_CACHED", "PENDING", order_amount="500"))
    result = await apply(_nested("ORD_CACHED", "SUCCESS"))

    assert result.status == PaymentStatus.SUCCESS
    assert result.order_amount == Decimal("500")
    record = await load_record(order.id)
    assert record.order_amount == Decimal("500")
    assert record.transaction_amount == Decimal("500")

    async with session_factory() as session:
        refreshed = await OrderRepository().get(session, order.id)
    assert Decimal(refreshed.order_metadata["amount"]) == Decimal("500")


async def test_zero_amount_is_not_cached_in_metadata(make_order, apply, session_factory):
    order = await make_order(custom_order_id="ORD_NO_CACHE")

    await apply(_nested("ORD_NO_CACHE", "PENDING"))

    async with session_factory() as session:
        refreshed = await OrderRepository().get(session, order.id)
    assert "amount" not in refreshed.order_metadata
    assert refreshed.order_metadata["last_payment_status"] == "pending"


async def test_metadata_is_refreshed_and_provider_id_cached(make_order, apply, session_factory):
    order = await make_order(custom_order_id="ORD_META", order_metadata={"collect_id": "COL_1"})

    await apply(_nested("COL_1", "SUCCESS", amount="10", cf_payment_id="CF_77"))

    async with session_factory() as session:
        refreshed = await OrderRepository().get(session, order.id)
        meta = refreshed.order_metadata

    assert meta["last_payment_status"] == "success"
    assert meta["bank_reference"] == "CF_77"
    assert meta["transaction_id"] == "CF_77"
    assert meta["collect_request_id"] == "COL_1"
    assert meta["collect_id"] == "COL_1"
    assert "last_webhook_update" in meta


async def test_concurrent_terminal_wins_inside_upsert(make_order, apply, load_record, session_factory):
    """
    Con una guardia que lo permite todo, el WHERE del upsert sigue
    protegiendo el estado terminal.
    """
    order = await make_order(custom_order_id="ORD_RACE")
    await apply(_nested("ORD_RACE", "SUCCESS", amount="15"))

    permissive = ReconciliationEngine(
        resolver=IdentifierResolver(),
        record_repo=PaymentRecordRepository(),
        order_repo=OrderRepository(),
        transition_guard=lambda old, new: True,
    )
    async with session_factory() as session:
        _, result = await permissive.reconcile_payload(session, _nested("ORD_RACE", "FAILED"))
        await session.commit()

    assert result.outcome == ReconcileOutcome.UNCHANGED
    assert result.status == PaymentStatus.SUCCESS
    record = await load_record(order.id)
    assert record.status == PaymentStatus.SUCCESS


async def test_status_mapper_is_injectable(make_order, session_factory, load_record):
    order = await make_order(custom_order_id="ORD_MAP")
    engine = ReconciliationEngine(
        resolver=IdentifierResolver(),
        record_repo=PaymentRecordRepository(),
        order_repo=OrderRepository(),
        status_mapper=lambda raw, capture=None: PaymentStatus.CANCELLED,
    )

    async with session_factory() as session:
        await engine.reconcile_payload(session, _nested("ORD_MAP", "SUCCESS"))
        await session.commit()

    record = await load_record(order.id)
    assert record.status == PaymentStatus.CANCELLED

# Fin del archivo backend/tests/modules/payments/facades/reconciliation/test_reconciliation_engine.py
