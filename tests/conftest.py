# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para SchoolPay.

- PYTHON_ENV=test antes de importar cualquier módulo de schoolpay
- SQLite async (aiosqlite) en archivo temporal por test, esquema desde Base.metadata
- Listeners para que aiosqlite respete BEGIN/SAVEPOINT (la metadata de la
  orden se refresca dentro de begin_nested)
- App FastAPI con overrides de sesión y del servicio de reintentos
"""

import os

os.environ["PYTHON_ENV"] = "test"
os.environ.setdefault("WEBHOOK_RETRY_SCHEDULER_ENABLED", "false")

from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from schoolpay.shared.database.base import Base
import schoolpay.modules.payments.models  # noqa: F401  (registra tablas en Base.metadata)
from schoolpay.modules.orders.repositories import OrderRepository


# -----------------------------------------------------------------------------
# Base de datos
# -----------------------------------------------------------------------------
def _enable_sqlite_savepoints(async_engine) -> None:
    """
    pysqlite/aiosqlite emiten BEGIN por su cuenta y rompen SAVEPOINT;
    se desactiva ese comportamiento y SQLAlchemy emite el BEGIN.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def engine(tmp_path):
    db_path = tmp_path / "schoolpay_test.db"
    async_engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        connect_args={"timeout": 15},
    )
    _enable_sqlite_savepoints(async_engine)

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_engine
    await async_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_order(session_factory):
    """
    Factory de órdenes persistidas (commit propio).

    Uso:
        order = await make_order(custom_order_id="ORD_1", amount="500")
    """
    repo = OrderRepository()

    async def _make(**kwargs):
        amount = kwargs.pop("amount", None)
        async with session_factory() as session:
            order = await repo.create_order(
                session,
                school_id=kwargs.pop("school_id", "SCHOOL_1"),
                amount=Decimal(str(amount)) if amount is not None else None,
                student_info=kwargs.pop("student_info", {"name": "Ana", "id": "S1"}),
                **kwargs,
            )
            await session.commit()
            return order

    return _make


# -----------------------------------------------------------------------------
# App FastAPI y cliente httpx (con ciclo de vida)
# -----------------------------------------------------------------------------
@pytest.fixture
def app(session_factory):
    from schoolpay.main import app as fastapi_app
    from schoolpay.shared.database.database import get_async_session
    from schoolpay.modules.payments.container import (
        build_ledger_service,
        build_reconciliation_engine,
        get_retry_service,
    )
    from schoolpay.modules.payments.services import WebhookRetryService

    async def _override_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    ledger_service = build_ledger_service()
    retry_service = WebhookRetryService(
        session_factory,
        ledger_repo=ledger_service.ledger_repo,
        ledger_service=ledger_service,
        engine=build_reconciliation_engine(),
        attempt_timeout_seconds=5.0,
    )

    fastapi_app.dependency_overrides[get_async_session] = _override_session
    fastapi_app.dependency_overrides[get_retry_service] = lambda: retry_service
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
