# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- JSONType: JSON portable (JSONB en PostgreSQL, JSON en SQLite)
- as_str_enum: helper genérico para mapear enums Python a columnas VARCHAR

Autor: SchoolPay
Fecha: 2026-10-17
"""

from __future__ import annotations

from enum import Enum
from typing import Type

from sqlalchemy import JSON, MetaData
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# JSONB en PostgreSQL; JSON genérico en el resto de dialectos (tests con SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de SchoolPay.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_str_enum(
    enum_cls: Type[Enum],
    name: str | None = None,
    length: int = 32,
) -> SAEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy persistido como VARCHAR.

    Uso típico:

        from schoolpay.shared.database.base import Base, as_str_enum
        from .enums import PaymentStatus

        class PaymentRecord(Base):
            status: Mapped[PaymentStatus] = mapped_column(
                as_str_enum(PaymentStatus),
                nullable=False,
            )

    - Guarda el `.value` del enum (no el nombre del miembro).
    - native_enum=False: no requiere CREATE TYPE, funciona igual en
      PostgreSQL y en SQLite.
    - Si no se pasa `name`, usa `__db_enum_name__` del enum o el nombre
      de la clase en minúsculas.
    """
    enum_name = name or getattr(enum_cls, "__db_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SAEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        length=length,
        values_callable=_values,
        validate_strings=True,
    )


__all__ = ["Base", "NAMING_CONVENTION", "JSONType", "as_str_enum"]

# Fin del archivo backend/schoolpay/shared/database/base.py
