"""Binding persistence.

:class:`BindingStore` is the storage contract; :class:`InMemoryBindingStore`
and :class:`SqliteBindingStore` implement it.
"""
from __future__ import annotations

from name_attestation.store.base import BindingRow, BindingStore
from name_attestation.store.memory import InMemoryBindingStore
from name_attestation.store.sqlite import SqliteBindingStore

__all__ = [
    "BindingRow",
    "BindingStore",
    "InMemoryBindingStore",
    "SqliteBindingStore",
]
