"""Error taxonomy for name-attestation.

Registry and persistence failures are raised as exceptions rooted at
:class:`AttestationError`. Expected refusals (unowned source address, wallet
still locked, cancelled unlock) are *not* exceptions: they come back as
``False`` or as an :class:`~name_attestation.unlock.UnlockOutcome`.

:class:`OperationFailure` is the typed record produced when an operation
boundary (registration call, per-binding tick step, unlock call) absorbs an
exception so it can be logged and reported without escaping.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass


class AttestationError(Exception):
    """Base class for all name-attestation errors."""


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------


class RegistryError(AttestationError):
    """Base class for errors reported by a registry client."""


class RegistryTransportError(RegistryError):
    """The registry rejected a call or could not be reached.

    Parameters
    ----------
    code:
        Numeric error code as reported by the registry node.
    message:
        Human-readable error message.
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"registry error {code}: {message}")
        self.code = code
        self.message = message


class NoPrivateKeyError(RegistryError):
    """The wallet does not hold the private key required for an operation."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Wallet has no private key for address {address!r}.")
        self.address = address


class WrongPassphraseError(RegistryError):
    """The wallet passphrase supplied to an unlock attempt is incorrect."""


# ------------------------------------------------------------------
# Registration progress
# ------------------------------------------------------------------


class RegistrationStateError(AttestationError):
    """A registration step was requested out of order."""


class PayloadDecodeError(AttestationError, ValueError):
    """A persisted registration payload could not be decoded."""


# ------------------------------------------------------------------
# Persistence
# ------------------------------------------------------------------


class PersistenceError(AttestationError):
    """The binding store failed to read or write a row."""


class BindingNotFoundError(AttestationError, KeyError):
    """No persisted row exists for a name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No binding row stored for name {name!r}.")
        self.name = name


# ------------------------------------------------------------------
# Failure records
# ------------------------------------------------------------------


@dataclass(frozen=True)
class OperationFailure:
    """An exception absorbed at an operation boundary.

    Parameters
    ----------
    operation:
        Short operation label, e.g. ``"start_registration"`` or ``"activate"``.
    name:
        Registry name of the binding involved, or ``None`` if the failure
        happened before a name was known.
    error_type:
        Class name of the absorbed exception.
    message:
        String form of the absorbed exception.
    """

    operation: str
    name: str | None
    error_type: str
    message: str

    @classmethod
    def from_exception(
        cls, operation: str, name: str | None, exc: BaseException
    ) -> "OperationFailure":
        """Build a failure record from a caught exception."""
        return cls(
            operation=operation,
            name=name,
            error_type=type(exc).__name__,
            message=str(exc),
        )

    def log(self, logger: logging.Logger) -> None:
        """Emit this failure as a single error line on *logger*."""
        logger.error(
            "%s failed for %r (%s): %s",
            self.operation,
            self.name,
            self.error_type,
            self.message,
        )


__all__ = [
    "AttestationError",
    "BindingNotFoundError",
    "NoPrivateKeyError",
    "OperationFailure",
    "PayloadDecodeError",
    "PersistenceError",
    "RegistrationStateError",
    "RegistryError",
    "RegistryTransportError",
    "WrongPassphraseError",
]
