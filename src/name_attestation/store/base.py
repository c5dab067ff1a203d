"""Abstract binding persistence interface and row type.

BindingStore defines the storage contract for name bindings. Rows are not
unique by name: every mutation keyed by ``name`` applies to all rows that
carry it, and rows are never deleted.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class BindingRow:
    """One persisted name binding.

    Parameters
    ----------
    name:
        Registry name the credential is attested at.
    identity_ref:
        Opaque reference to the owning identity.
    credential_hash:
        Fingerprint being attested.
    active:
        True once the registration finished and the binding left the
        pending ledger.
    reg_payload:
        Serialized registration progress; ``None`` once active.
    update_txid:
        Transaction id of the attestation update, once issued.
    row_id:
        Store-assigned identifier, ``None`` until inserted.
    """

    name: str
    identity_ref: str
    credential_hash: str
    active: bool = False
    reg_payload: Optional[str] = None
    update_txid: Optional[str] = None
    row_id: Optional[int] = None

    @property
    def pending(self) -> bool:
        """True while the row still belongs in the pending ledger."""
        return self.reg_payload is not None and not self.active

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "row_id": self.row_id,
            "name": self.name,
            "identity_ref": self.identity_ref,
            "credential_hash": self.credential_hash,
            "active": self.active,
            "reg_payload": self.reg_payload,
            "update_txid": self.update_txid,
        }


class BindingStore(ABC):
    """Abstract base class for binding storage backends."""

    @abstractmethod
    def insert(self, row: BindingRow) -> BindingRow:
        """Persist a new row and return it with ``row_id`` assigned."""

    @abstractmethod
    def rows(self) -> list[BindingRow]:
        """Return every stored row in insertion order."""

    @abstractmethod
    def pending_rows(self) -> list[BindingRow]:
        """Return rows with a non-null payload that are not yet active."""

    @abstractmethod
    def lookup(self, name: str) -> BindingRow | None:
        """Return the first row stored for *name*, or ``None``."""

    @abstractmethod
    def update_payload(self, name: str, payload: str) -> None:
        """Replace the registration payload of the rows for *name*."""

    @abstractmethod
    def mark_active(self, name: str) -> None:
        """Set ``active`` and clear the payload of the rows for *name*."""

    @abstractmethod
    def set_update_tx(self, name: str, txid: str) -> None:
        """Record the attestation update transaction for *name*."""


__all__ = ["BindingRow", "BindingStore"]
