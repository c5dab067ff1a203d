"""RegistryClient — the capability set consumed from a name registry.

The orchestrator never talks to a registry node directly; it goes through
this interface. :class:`~name_attestation.registry.local.LocalNameRegistry`
is the in-process implementation shipped with the package. A client for a
real node implements the same methods over its RPC transport and raises
:class:`~name_attestation.errors.RegistryTransportError` for RPC failures.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from name_attestation.naming import derive_name

ACTIVATION_DEPTH: int = 12
"""Confirmations the commit transaction needs before a name can be activated."""

FINISHED_DEPTH: int = 1
"""Confirmations the activation transaction needs before a registration is finished."""


@dataclass(frozen=True)
class NameEntry:
    """Current registry state of an active name.

    Parameters
    ----------
    name:
        Full registry name (``"<namespace>/<key>"``).
    value:
        Raw value text stored at the name.
    address:
        Address currently holding the name.
    """

    name: str
    value: str
    address: str


class Address(ABC):
    """An address as seen through a registry client's wallet."""

    @property
    @abstractmethod
    def address(self) -> str:
        """The address string."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Return True if the address is syntactically well-formed."""

    @abstractmethod
    def is_mine(self) -> bool:
        """Return True if the wallet holds the private key for this address."""

    @abstractmethod
    def sign_message(self, message: str) -> str:
        """Sign *message* with this address's key.

        Raises
        ------
        NoPrivateKeyError
            If the wallet does not hold the key.
        RegistryTransportError
            If the wallet is locked.
        """

    @abstractmethod
    def verify_signature(self, message: str, signature: str) -> bool:
        """Return True if *signature* over *message* was made by this address."""

    def __str__(self) -> str:
        return self.address


class RegistryClient(ABC):
    """Abstract client for a key→value name registry with a wallet."""

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    @abstractmethod
    def name_show(self, name: str) -> NameEntry | None:
        """Return the current entry for *name*, or ``None`` if it is not active."""

    def query_name(self, namespace: str, key: str) -> NameEntry | None:
        """Look up the entry for *key* under *namespace*."""
        return self.name_show(derive_name(namespace, key))

    @abstractmethod
    def name_new(self, name: str) -> tuple[str, str]:
        """Issue the commit transaction for *name*.

        Returns
        -------
        tuple[str, str]
            ``(txid, rand)``: the commit transaction id and the salt that
            must be revealed on activation.
        """

    @abstractmethod
    def name_firstupdate(
        self, name: str, rand: str, new_txid: str, value: str = ""
    ) -> str:
        """Reveal a confirmed commit and activate *name*. Returns the txid."""

    @abstractmethod
    def name_update(self, name: str, value: str, to_address: str | None = None) -> str:
        """Set the value of *name*, optionally sending it to *to_address*.

        Returns the transaction id.

        Raises
        ------
        NoPrivateKeyError
            If the wallet does not hold the key of the name's current owner.
        """

    # ------------------------------------------------------------------
    # Transactions and addresses
    # ------------------------------------------------------------------

    @abstractmethod
    def confirmations(self, txid: str) -> int:
        """Return the number of confirmations of transaction *txid*."""

    @abstractmethod
    def address(self, address: str) -> Address:
        """Return an :class:`Address` view of the address string."""

    # ------------------------------------------------------------------
    # Wallet lock
    # ------------------------------------------------------------------

    @abstractmethod
    def need_wallet_passphrase(self) -> bool:
        """Return True if spend operations currently require an unlock."""

    @abstractmethod
    def unlock_wallet(self, passphrase: str) -> None:
        """Unlock the wallet.

        Raises
        ------
        WrongPassphraseError
            If *passphrase* is incorrect.
        """


__all__ = [
    "ACTIVATION_DEPTH",
    "FINISHED_DEPTH",
    "Address",
    "NameEntry",
    "RegistryClient",
]
