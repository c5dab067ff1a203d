"""LocalNameRegistry — an in-process name registry with a wallet.

Models the parts of a Namecoin-style registry that the attestation
lifecycle depends on:

- a block height, advanced explicitly with :meth:`LocalNameRegistry.mine`,
  from which transaction confirmations are derived;
- the commit / activate / update transactions for names;
- a wallet of Ed25519-keyed addresses that can be passphrase-encrypted and
  locked.

Transactions take effect immediately and are confirmed by every block mined
after them. State can be saved to and loaded from a JSON file so that the
CLI can keep a simulated chain between invocations.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
import threading
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from name_attestation.errors import (
    NoPrivateKeyError,
    RegistryTransportError,
    WrongPassphraseError,
)
from name_attestation.registry import keys
from name_attestation.registry.client import (
    ACTIVATION_DEPTH,
    Address,
    NameEntry,
    RegistryClient,
)

logger = logging.getLogger(__name__)

# Error codes follow the node RPC conventions.
RPC_INVALID_ADDRESS = -5
RPC_INVALID_PARAMETER = -8
RPC_WALLET_UNLOCK_NEEDED = -13
RPC_VERIFY_REJECTED = -26
RPC_NAME_NOT_FOUND = -4

_PBKDF2_ITERATIONS = 100_000


@dataclass
class _NameState:
    value: str
    address: str


class LocalAddress(Address):
    """Address view backed by a :class:`LocalNameRegistry` wallet."""

    def __init__(self, registry: "LocalNameRegistry", address: str) -> None:
        self._registry = registry
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    def is_valid(self) -> bool:
        return keys.is_valid_address(self._address)

    def is_mine(self) -> bool:
        return self._registry.owns(self._address)

    def sign_message(self, message: str) -> str:
        return self._registry.sign_message(self._address, message)

    def verify_signature(self, message: str, signature: str) -> bool:
        return keys.verify_message(self._address, message, signature)

    def __repr__(self) -> str:
        return f"LocalAddress({self._address!r})"


class LocalNameRegistry(RegistryClient):
    """In-process registry and wallet.

    Thread-safe. All state changes acquire a lock.

    Example
    -------
    ::

        registry = LocalNameRegistry()
        txid, rand = registry.name_new("ot/abc123")
        registry.mine(ACTIVATION_DEPTH)
        registry.name_firstupdate("ot/abc123", rand, txid)
    """

    def __init__(self) -> None:
        self._height = 0
        self._transactions: dict[str, int] = {}
        self._commits: dict[str, str] = {}
        self._names: dict[str, _NameState] = {}
        self._keys: dict[str, bytes] = {}
        self._passphrase_salt: bytes | None = None
        self._passphrase_digest: bytes | None = None
        self._unlocked = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    @property
    def height(self) -> int:
        with self._lock:
            return self._height

    def mine(self, blocks: int = 1) -> int:
        """Advance the chain by *blocks* and return the new height."""
        if blocks < 0:
            raise ValueError(f"blocks must be non-negative, got {blocks}")
        with self._lock:
            self._height += blocks
            logger.debug("Mined %d block(s), height is now %d", blocks, self._height)
            return self._height

    def confirmations(self, txid: str) -> int:
        with self._lock:
            if txid not in self._transactions:
                raise RegistryTransportError(
                    RPC_INVALID_ADDRESS,
                    f"No information available about transaction {txid!r}",
                )
            return self._height - self._transactions[txid]

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def name_show(self, name: str) -> NameEntry | None:
        with self._lock:
            state = self._names.get(name)
            if state is None:
                return None
            return NameEntry(name=name, value=state.value, address=state.address)

    def name_new(self, name: str) -> tuple[str, str]:
        with self._lock:
            self._require_unlocked()
            rand = secrets.token_hex(8)
            txid = self._record_transaction()
            self._commits[txid] = _commitment(rand, name)
            logger.debug("name_new %r -> %s", name, txid)
            return txid, rand

    def name_firstupdate(
        self, name: str, rand: str, new_txid: str, value: str = ""
    ) -> str:
        with self._lock:
            self._require_unlocked()
            commitment = self._commits.get(new_txid)
            if commitment is None:
                raise RegistryTransportError(
                    RPC_INVALID_PARAMETER,
                    f"previous transaction {new_txid!r} is not a pending name_new",
                )
            if not hmac.compare_digest(commitment, _commitment(rand, name)):
                raise RegistryTransportError(
                    RPC_INVALID_PARAMETER, f"commitment does not match name {name!r}"
                )
            if self.confirmations(new_txid) < ACTIVATION_DEPTH:
                raise RegistryTransportError(
                    RPC_VERIFY_REJECTED, "previous transaction is not yet confirmed"
                )
            if name in self._names:
                raise RegistryTransportError(
                    RPC_VERIFY_REJECTED, f"this name is already active: {name!r}"
                )

            owner = self._create_key()
            self._names[name] = _NameState(value=value, address=owner)
            del self._commits[new_txid]
            txid = self._record_transaction()
            logger.debug("name_firstupdate %r -> %s (owner %s)", name, txid, owner)
            return txid

    def name_update(self, name: str, value: str, to_address: str | None = None) -> str:
        with self._lock:
            self._require_unlocked()
            state = self._names.get(name)
            if state is None:
                raise RegistryTransportError(RPC_NAME_NOT_FOUND, f"name not found: {name!r}")
            if state.address not in self._keys:
                raise NoPrivateKeyError(state.address)
            if to_address is not None and not keys.is_valid_address(to_address):
                raise RegistryTransportError(
                    RPC_INVALID_ADDRESS, f"Invalid address {to_address!r}"
                )

            state.value = value
            if to_address is not None:
                state.address = to_address
            txid = self._record_transaction()
            logger.debug("name_update %r -> %s", name, txid)
            return txid

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def address(self, address: str) -> LocalAddress:
        return LocalAddress(self, address)

    def new_address(self) -> str:
        """Create a fresh wallet address and return it."""
        with self._lock:
            return self._create_key()

    def forget_address(self, address: str) -> None:
        """Drop the private key for *address* from the wallet.

        Raises
        ------
        KeyError
            If the wallet does not hold *address*.
        """
        with self._lock:
            if address not in self._keys:
                raise KeyError(f"Address {address!r} is not in the wallet")
            del self._keys[address]

    def owns(self, address: str) -> bool:
        """Return True if the wallet holds the key for *address*."""
        with self._lock:
            return address in self._keys

    def sign_message(self, address: str, message: str) -> str:
        """Sign *message* with the wallet key of *address*."""
        with self._lock:
            private_key = self._keys.get(address)
            if private_key is None:
                raise NoPrivateKeyError(address)
            self._require_unlocked()
            return keys.sign_message(private_key, message)

    # ------------------------------------------------------------------
    # Wallet lock
    # ------------------------------------------------------------------

    @property
    def encrypted(self) -> bool:
        with self._lock:
            return self._passphrase_digest is not None

    def encrypt_wallet(self, passphrase: str) -> None:
        """Protect the wallet with *passphrase* and lock it.

        Raises
        ------
        ValueError
            If *passphrase* is empty.
        RegistryTransportError
            If the wallet is already encrypted.
        """
        if not passphrase:
            raise ValueError("passphrase must be non-empty")
        with self._lock:
            if self._passphrase_digest is not None:
                raise RegistryTransportError(
                    RPC_WALLET_UNLOCK_NEEDED, "wallet is already encrypted"
                )
            self._passphrase_salt = secrets.token_bytes(16)
            self._passphrase_digest = _derive(passphrase, self._passphrase_salt)
            self._unlocked = False

    def lock_wallet(self) -> None:
        with self._lock:
            self._unlocked = False

    def need_wallet_passphrase(self) -> bool:
        with self._lock:
            return self._passphrase_digest is not None and not self._unlocked

    def unlock_wallet(self, passphrase: str) -> None:
        with self._lock:
            if self._passphrase_digest is None or self._passphrase_salt is None:
                return
            candidate = _derive(passphrase, self._passphrase_salt)
            if not hmac.compare_digest(candidate, self._passphrase_digest):
                raise WrongPassphraseError("The wallet passphrase entered was incorrect.")
            self._unlocked = True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize the chain and wallet to a plain dictionary."""
        with self._lock:
            return {
                "height": self._height,
                "transactions": dict(self._transactions),
                "commits": dict(self._commits),
                "names": {
                    name: {"value": state.value, "address": state.address}
                    for name, state in self._names.items()
                },
                "wallet": {
                    "keys": {addr: key.hex() for addr, key in self._keys.items()},
                    "passphrase_salt": (
                        self._passphrase_salt.hex() if self._passphrase_salt else None
                    ),
                    "passphrase_digest": (
                        self._passphrase_digest.hex() if self._passphrase_digest else None
                    ),
                },
            }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LocalNameRegistry":
        """Rebuild a registry from :meth:`to_dict` output. Encrypted wallets start locked."""
        registry = cls()
        registry._height = int(data.get("height", 0))  # type: ignore[arg-type]
        registry._transactions = {
            str(txid): int(height)
            for txid, height in dict(data.get("transactions", {})).items()  # type: ignore[arg-type]
        }
        registry._commits = dict(data.get("commits", {}))  # type: ignore[arg-type]
        registry._names = {
            str(name): _NameState(value=entry["value"], address=entry["address"])
            for name, entry in dict(data.get("names", {})).items()  # type: ignore[arg-type]
        }
        wallet = dict(data.get("wallet", {}))  # type: ignore[arg-type]
        registry._keys = {
            addr: bytes.fromhex(key) for addr, key in dict(wallet.get("keys", {})).items()
        }
        salt = wallet.get("passphrase_salt")
        digest = wallet.get("passphrase_digest")
        registry._passphrase_salt = bytes.fromhex(salt) if salt else None
        registry._passphrase_digest = bytes.fromhex(digest) if digest else None
        return registry

    def save(self, path: Path) -> None:
        """Write the registry state to *path* as JSON."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "LocalNameRegistry":
        """Load registry state from *path*, or start empty if it does not exist."""
        if not path.exists():
            return cls()
        return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_unlocked(self) -> None:
        if self.need_wallet_passphrase():
            raise RegistryTransportError(
                RPC_WALLET_UNLOCK_NEEDED,
                "Please enter the wallet passphrase with walletpassphrase first.",
            )

    def _record_transaction(self) -> str:
        txid = hashlib.sha256(
            f"{self._height}:{len(self._transactions)}:{secrets.token_hex(16)}".encode()
        ).hexdigest()
        self._transactions[txid] = self._height
        return txid

    def _create_key(self) -> str:
        private_bytes, public_bytes = keys.generate_keypair()
        address = keys.address_from_public_key(public_bytes)
        self._keys[address] = private_bytes
        return address


def _commitment(rand: str, name: str) -> str:
    return hashlib.sha256(f"{rand}:{name}".encode("utf-8")).hexdigest()


def _derive(passphrase: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=_PBKDF2_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


__all__ = ["LocalAddress", "LocalNameRegistry"]
