# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps ISO 8601.

Autor: SchoolPay
Fecha: 2026-10-17
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> now = utcnow()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def from_iso8601(iso_string: str) -> datetime:
    """
    Parsea una cadena ISO 8601 y retorna datetime UTC timezone-aware.

    Examples:
        >>> dt = from_iso8601("2026-10-26T14:30:00Z")
        >>> dt.tzinfo == timezone.utc
        True
        >>> dt = from_iso8601("2026-10-26T14:30:00+05:30")
        >>> dt.hour
        9
    """
    dt = datetime.fromisoformat(iso_string.strip().replace('Z', '+00:00'))
    return ensure_utc(dt)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.

    Los datetimes naive se asumen en UTC (SQLite no conserva la zona).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Interpreta un timestamp de pasarela de forma tolerante.

    Acepta datetime, cadenas ISO 8601 o epoch en segundos (int/float o
    cadena numérica). Devuelve None si el valor no es interpretable.

    Examples:
        >>> parse_timestamp("no-es-fecha") is None
        True
        >>> parse_timestamp(0).year
        1970
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return from_iso8601(raw)
        except ValueError:
            pass
        try:
            return datetime.fromtimestamp(float(raw), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    Convierte datetime a string ISO 8601 con 'Z' para UTC.

    Examples:
        >>> dt = datetime(2026, 10, 26, 14, 30, 0, tzinfo=timezone.utc)
        >>> to_iso8601(dt)
        '2026-10-26T14:30:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')


__all__ = ["utcnow", "to_iso8601", "from_iso8601", "ensure_utc", "parse_timestamp"]
# Fin del archivo
