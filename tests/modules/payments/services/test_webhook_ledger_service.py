# backend/tests/modules/payments/services/test_webhook_ledger_service.py
# -*- coding: utf-8 -*-
"""
WebhookLedgerService: transiciones y backoff exponencial.

Con base=60 y max=3 las fallas quedan en +60s, +120s, +240s y la
cuarta deja la entrada agotada (sin next_retry_at).
"""

from datetime import datetime, timedelta, timezone

import pytest

from schoolpay.modules.payments.enums import LedgerStatus
from schoolpay.modules.payments.repositories import WebhookLedgerRepository
from schoolpay.modules.payments.services import LedgerTransitionError, WebhookLedgerService

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return WebhookLedgerService(WebhookLedgerRepository(), max_retries=3, base_delay_seconds=60)


async def _processing_entry(service, db, payload=None):
    entry = await service.open_entry(db, payload=payload or {"order_id": "X"}, event_type="test")
    await service.mark_processing(db, entry)
    return entry


@pytest.mark.parametrize(
    "retry_count, delay",
    [(0, 60), (1, 120), (2, 240)],
)
def test_compute_next_retry_at_doubles(service, retry_count, delay):
    assert service.compute_next_retry_at(retry_count, NOW) == NOW + timedelta(seconds=delay)


@pytest.mark.parametrize("retry_count", [3, 4, 10])
def test_compute_next_retry_at_caps(service, retry_count):
    assert service.compute_next_retry_at(retry_count, NOW) is None


async def test_open_entry_defaults(service, db):
    entry = await service.open_entry(
        db,
        payload="raw text",
        headers={"X-Num": 1},
        user_agent="agent/1.0",
    )

    assert entry.id is not None
    assert entry.webhook_id.startswith("WH_")
    assert entry.status == LedgerStatus.PENDING
    assert entry.retry_count == 0
    assert entry.payload == {"_body": "raw text"}
    assert entry.headers == {"X-Num": "1"}
    assert entry.event_type == "payment_update"


async def test_failure_schedule_until_exhausted(service, db):
    entry = await _processing_entry(service, db)

    await service.record_failure(db, entry, error="boom", is_retry=False, now=NOW)
    assert entry.status == LedgerStatus.FAILED
    assert entry.retry_count == 0
    assert entry.next_retry_at == NOW + timedelta(seconds=60)
    assert not service.is_exhausted(entry)

    expected = [(1, 120), (2, 240)]
    for count, delay in expected:
        entry.status = LedgerStatus.RETRYING
        await service.record_failure(db, entry, error="boom", is_retry=True, now=NOW)
        assert entry.retry_count == count
        assert entry.next_retry_at == NOW + timedelta(seconds=delay)

    entry.status = LedgerStatus.RETRYING
    await service.record_failure(db, entry, error="boom", is_retry=True, now=NOW)
    assert entry.retry_count == 3
    assert entry.next_retry_at is None
    assert service.is_exhausted(entry)


async def test_mark_processed_clears_retry_state(service, db):
    entry = await _processing_entry(service, db)
    await service.record_failure(db, entry, error="boom", is_retry=False, now=NOW)
    entry.status = LedgerStatus.RETRYING

    await service.mark_processed(db, entry, response={"success": True}, processing_time_ms=12)

    assert entry.status == LedgerStatus.PROCESSED
    assert entry.next_retry_at is None
    assert entry.error_message is None
    assert entry.processing_time_ms == 12


async def test_long_error_is_truncated(service, db):
    entry = await _processing_entry(service, db)
    await service.record_failure(db, entry, error="x" * 5000, is_retry=False, now=NOW)
    assert len(entry.error_message) == 2000


async def test_processed_entry_is_final(service, db):
    entry = await _processing_entry(service, db)
    await service.mark_processed(db, entry, response={})

    with pytest.raises(LedgerTransitionError):
        await service.mark_processing(db, entry)
    with pytest.raises(LedgerTransitionError):
        await service.record_failure(db, entry, error="late", is_retry=True)


async def test_pending_cannot_jump_to_processed(service, db):
    entry = await service.open_entry(db, payload={})
    with pytest.raises(LedgerTransitionError):
        await service.mark_processed(db, entry, response={})


async def test_list_entries_filters_by_creation_range(service, db):
    old = await service.open_entry(db, payload={"n": 1})
    mid = await service.open_entry(db, payload={"n": 2})
    new = await service.open_entry(db, payload={"n": 3})
    old.created_at = NOW - timedelta(days=2)
    mid.created_at = NOW - timedelta(hours=1)
    new.created_at = NOW + timedelta(days=1)
    await db.flush()

    repo = service.ledger_repo
    in_range = await repo.list_entries(
        db,
        created_from=NOW - timedelta(days=1),
        created_to=NOW,
    )
    assert [e.id for e in in_range] == [mid.id]

    since = await repo.list_entries(db, created_from=NOW - timedelta(hours=1))
    assert [e.id for e in since] == [new.id, mid.id]

    # Un offset distinto de UTC se normaliza antes de comparar
    until = await repo.list_entries(
        db,
        created_to=(NOW - timedelta(days=1)).astimezone(timezone(timedelta(hours=-5))),
    )
    assert [e.id for e in until] == [old.id]

# Fin del archivo backend/tests/modules/payments/services/test_webhook_ledger_service.py
