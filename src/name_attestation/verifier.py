"""Read-only verification of credential attestations against the registry.

A relying party that knows a credential fingerprint and the identity's
claimed source address recomputes the registry name, reads its value, and
checks that the name is held by that address and carries the address's
signature over the fingerprint. Nothing is written.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum

from name_attestation.naming import NAMESPACE, derive_name
from name_attestation.registry.client import RegistryClient
from name_attestation.update import SIGNATURE_FIELD

logger = logging.getLogger(__name__)


class VerificationReason(str, Enum):
    """Why a verification passed or failed."""

    NOT_FOUND = "not_found"
    UNPARSEABLE = "unparseable"
    NO_SIGNATURE = "no_signature"
    SOURCE_MISMATCH = "source_mismatch"
    BAD_SIGNATURE = "bad_signature"
    VALID = "valid"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of an attestation check.

    Parameters
    ----------
    name:
        Registry name that was consulted.
    reason:
        The check that decided the outcome.
    """

    name: str
    reason: VerificationReason

    @property
    def valid(self) -> bool:
        return self.reason is VerificationReason.VALID


class Verifier:
    """Read-only attestation checker.

    Parameters
    ----------
    client:
        Registry client used for lookups and signature checks.
    namespace:
        Registry namespace for derived names.

    Example
    -------
    ::

        verifier = Verifier(registry)
        if verifier.verify("abc123", "N3kq..."):
            ...
    """

    def __init__(self, client: RegistryClient, namespace: str = NAMESPACE) -> None:
        self._client = client
        self._namespace = namespace

    def verify(self, credential_hash: str, claimed_source: str) -> bool:
        """Return True iff the registry validly attests *credential_hash* for *claimed_source*."""
        return self.check(credential_hash, claimed_source).valid

    def check(self, credential_hash: str, claimed_source: str) -> VerificationResult:
        """Verify and report which check decided the outcome.

        Registry transport errors propagate; they are not a verdict. An
        empty *credential_hash* names no entry and is reported as
        ``NOT_FOUND``.
        """
        try:
            name = derive_name(self._namespace, credential_hash)
        except ValueError:
            return self._result(
                f"{self._namespace}/{credential_hash}", VerificationReason.NOT_FOUND
            )
        logger.debug("Verifying credential hash %r against source %r", credential_hash, claimed_source)

        entry = self._client.name_show(name)
        if entry is None:
            return self._result(name, VerificationReason.NOT_FOUND)

        try:
            value = json.loads(entry.value)
        except json.JSONDecodeError:
            return self._result(name, VerificationReason.UNPARSEABLE)

        signature = value.get(SIGNATURE_FIELD) if isinstance(value, dict) else None
        if not isinstance(signature, str):
            return self._result(name, VerificationReason.NO_SIGNATURE)

        if entry.address != claimed_source:
            return self._result(name, VerificationReason.SOURCE_MISMATCH)

        address = self._client.address(entry.address)
        if not address.verify_signature(credential_hash, signature):
            return self._result(name, VerificationReason.BAD_SIGNATURE)
        return self._result(name, VerificationReason.VALID)

    @staticmethod
    def _result(name: str, reason: VerificationReason) -> VerificationResult:
        logger.debug("Verification of %r: %s", name, reason.value)
        return VerificationResult(name=name, reason=reason)


__all__ = ["VerificationReason", "VerificationResult", "Verifier"]
