# -*- coding: utf-8 -*-
"""
backend/schoolpay/shared/utils/__init__.py
"""

from .datetime_helpers import utcnow, from_iso8601, ensure_utc, parse_timestamp, to_iso8601

__all__ = ["utcnow", "from_iso8601", "ensure_utc", "parse_timestamp", "to_iso8601"]
