"""Address derivation and message signatures for the local registry.

Addresses are base58check strings in the Namecoin style: a version byte,
a 20-byte key hash and a 4-byte double-SHA-256 checksum. Keys are Ed25519
(via the ``cryptography`` package) rather than secp256k1.

Signed messages
---------------
A message signature is ``base64(public_key || ed25519_signature)`` over
:data:`MESSAGE_MAGIC` followed by the UTF-8 message. Carrying the public key
inside the signature lets a verifier recover the signing address from the
signature alone, which is the property registry message signing relies on.
"""
from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

ADDRESS_VERSION: int = 52
MESSAGE_MAGIC: bytes = b"Namecoin Signed Message:\n"

_PUBLIC_KEY_SIZE = 32
_SIGNATURE_SIZE = 64
_BASE58_ALPHABET: bytes = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


# ---------------------------------------------------------------------------
# Base58
# ---------------------------------------------------------------------------


def _base58_encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    result: list[bytes] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_BASE58_ALPHABET[remainder : remainder + 1])
    for byte in data:
        if byte == 0:
            result.append(b"1")
        else:
            break
    return b"".join(reversed(result)).decode("ascii")


def _base58_decode(encoded: str) -> bytes:
    """Decode a base58 string.

    Raises
    ------
    ValueError
        If the string contains a character outside the base58 alphabet.
    """
    n = 0
    alphabet_str = _BASE58_ALPHABET.decode("ascii")
    for char in encoded:
        if char not in alphabet_str:
            raise ValueError(f"Invalid base58 character {char!r} in {encoded!r}")
        n = n * 58 + alphabet_str.index(char)
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = 0
    for char in encoded:
        if char == "1":
            pad_size += 1
        else:
            break
    return b"\x00" * pad_size + result


def _checksum(payload: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:4]


# ---------------------------------------------------------------------------
# Keys and addresses
# ---------------------------------------------------------------------------


def generate_keypair() -> tuple[bytes, bytes]:
    """Generate a new Ed25519 keypair as ``(private_bytes, public_bytes)``."""
    private_key = Ed25519PrivateKey.generate()
    private_bytes = private_key.private_bytes(
        Encoding.Raw, PrivateFormat.Raw, NoEncryption()
    )
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return private_bytes, public_bytes


def address_from_public_key(public_key_bytes: bytes) -> str:
    """Derive the base58check address for a raw public key."""
    key_hash = hashlib.sha256(public_key_bytes).digest()[:20]
    payload = bytes([ADDRESS_VERSION]) + key_hash
    return _base58_encode(payload + _checksum(payload))


def is_valid_address(address: str) -> bool:
    """Return True if *address* is a well-formed address string.

    Checks the alphabet, decoded length, version byte and checksum. Says
    nothing about whether anyone holds the matching key.
    """
    if not address:
        return False
    try:
        raw = _base58_decode(address)
    except ValueError:
        return False
    if len(raw) != 25:
        return False
    payload, checksum = raw[:21], raw[21:]
    return payload[0] == ADDRESS_VERSION and _checksum(payload) == checksum


# ---------------------------------------------------------------------------
# Message signatures
# ---------------------------------------------------------------------------


def sign_message(private_key_bytes: bytes, message: str) -> str:
    """Sign *message* and return the base64 signature text."""
    private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    signature = private_key.sign(MESSAGE_MAGIC + message.encode("utf-8"))
    return base64.b64encode(public_bytes + signature).decode("ascii")


def verify_message(address: str, message: str, signature: str) -> bool:
    """Check that *signature* over *message* was made by the key of *address*.

    Returns ``False`` for malformed signature text, a signing key that does
    not hash to *address*, or a signature that fails Ed25519 verification.
    """
    try:
        raw = base64.b64decode(signature.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        return False
    if len(raw) != _PUBLIC_KEY_SIZE + _SIGNATURE_SIZE:
        return False

    public_bytes, sig = raw[:_PUBLIC_KEY_SIZE], raw[_PUBLIC_KEY_SIZE:]
    if address_from_public_key(public_bytes) != address:
        return False

    try:
        public_key = Ed25519PublicKey.from_public_bytes(public_bytes)
        public_key.verify(sig, MESSAGE_MAGIC + message.encode("utf-8"))
        return True
    except (InvalidSignature, ValueError):
        return False


__all__ = [
    "ADDRESS_VERSION",
    "MESSAGE_MAGIC",
    "address_from_public_key",
    "generate_keypair",
    "is_valid_address",
    "sign_message",
    "verify_message",
]
