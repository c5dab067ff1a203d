"""In-memory binding store.

Keeps rows in a list. Suited to tests and to short-lived processes that do
not need to survive a restart.
"""
from __future__ import annotations

import dataclasses
import threading

from name_attestation.store.base import BindingRow, BindingStore


class InMemoryBindingStore(BindingStore):
    """List-backed :class:`BindingStore`.

    Rows handed out are copies, so callers cannot mutate stored state
    except through the store methods.
    """

    def __init__(self) -> None:
        self._rows: list[BindingRow] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def insert(self, row: BindingRow) -> BindingRow:
        with self._lock:
            stored = dataclasses.replace(row, row_id=self._next_id)
            self._next_id += 1
            self._rows.append(stored)
            return dataclasses.replace(stored)

    def rows(self) -> list[BindingRow]:
        with self._lock:
            return [dataclasses.replace(r) for r in self._rows]

    def pending_rows(self) -> list[BindingRow]:
        return [r for r in self.rows() if r.pending]

    def lookup(self, name: str) -> BindingRow | None:
        with self._lock:
            for row in self._rows:
                if row.name == name:
                    return dataclasses.replace(row)
        return None

    def update_payload(self, name: str, payload: str) -> None:
        with self._lock:
            for row in self._matching(name):
                row.reg_payload = payload

    def mark_active(self, name: str) -> None:
        with self._lock:
            for row in self._matching(name):
                row.active = True
                row.reg_payload = None

    def set_update_tx(self, name: str, txid: str) -> None:
        with self._lock:
            for row in self._matching(name):
                row.update_txid = txid

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def _matching(self, name: str) -> list[BindingRow]:
        return [r for r in self._rows if r.name == name]


__all__ = ["InMemoryBindingStore"]
