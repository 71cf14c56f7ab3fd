# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/database/database.py

SQLAlchemy async (asyncpg en producción, aiosqlite en pruebas).

Provee:
- engine (create_async_engine)
- SessionLocal (async_sessionmaker)
- Dependencia FastAPI: get_async_session
- check_database_health()

Notas:
- asyncpg recibe command_timeout para acotar cada consulta.
- SSL se activa solo cuando DB_SSLMODE=require.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from schoolpay.shared.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"echo": bool(settings.db_echo_sql)}

    connect_args: Dict[str, Any] = {
        "command_timeout": float(settings.db_command_timeout_s),
        "server_settings": {"search_path": "public"},
    }
    if settings.db_sslmode == "require":
        connect_args["ssl"] = "require"

    return {
        "echo": bool(settings.db_echo_sql),
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "connect_args": connect_args,
    }


DATABASE_URL: str = settings.database_url

logger.info(f"[DB] Engine async → {DATABASE_URL.split('@')[-1]} (echo={settings.db_echo_sql})")

engine = create_async_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

# ── Session factory
SessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
    autoflush=False,
)


# ── Dependencias FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError:
            # rollback para liberar cualquier transacción/lock
            await session.rollback()
            raise
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.warning(f"[DB] Health check falló: {e}")
        return False


__all__ = [
    "engine",
    "SessionLocal",
    "get_async_session",
    "check_database_health",
]
# Fin del archivo backend/schoolpay/shared/database/database.py
