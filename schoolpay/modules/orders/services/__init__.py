# -*- coding: utf-8 -*-
"""
backend/schoolpay/modules/orders/services/__init__.py
"""

from .identifier_resolver import IdentifierResolver, LookupPredicate, DEFAULT_LOOKUP_PREDICATES, clean_reference

__all__ = ["IdentifierResolver", "LookupPredicate", "DEFAULT_LOOKUP_PREDICATES", "clean_reference"]
