"""NameRegistration — registry-side progress of one name registration.

Claiming a name takes two transactions: a commit (``name_new``) that hides
the name behind a salted hash, and, once the commit is buried under
:data:`~name_attestation.registry.client.ACTIVATION_DEPTH` blocks, the
activation (``name_firstupdate``) that reveals it. Progress is held in a
:class:`RegistrationProgress` model whose JSON text is what gets persisted
as the binding's registration payload.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ValidationError

from name_attestation.errors import PayloadDecodeError, RegistrationStateError
from name_attestation.registry.client import (
    ACTIVATION_DEPTH,
    FINISHED_DEPTH,
    RegistryClient,
)


class RegistrationProgress(BaseModel):
    """Serializable registration progress.

    The JSON form is stable within one deployment version only.
    """

    name: str
    rand: str = ""
    new_txid: str = ""
    activate_txid: Optional[str] = None
    value: str = ""


class NameRegistration:
    """Drives one name through commit and activation.

    Parameters
    ----------
    client:
        Registry client used for the transactions and readiness queries.
    progress:
        Existing progress to resume from. If omitted, :meth:`register_name`
        must be called before anything else.
    """

    def __init__(
        self,
        client: RegistryClient,
        progress: RegistrationProgress | None = None,
    ) -> None:
        self._client = client
        self._progress = progress

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def register_name(self, name: str, value: str = "") -> str:
        """Issue the commit transaction for *name* and return its txid.

        *value* is revealed at activation. Attestations leave it empty and
        set the real value with a later update.

        Raises
        ------
        RegistrationStateError
            If this registration has already been started.
        """
        if self._progress is not None:
            raise RegistrationStateError(
                f"Registration of {self._progress.name!r} has already been started."
            )
        txid, rand = self._client.name_new(name)
        self._progress = RegistrationProgress(
            name=name, rand=rand, new_txid=txid, value=value
        )
        return txid

    def activate(self) -> str:
        """Issue the activation transaction and return its txid.

        Raises
        ------
        RegistrationStateError
            If the commit is not yet deep enough or activation was already sent.
        """
        progress = self._require_progress()
        if not self.can_activate():
            raise RegistrationStateError(
                f"Registration of {progress.name!r} cannot be activated yet."
            )
        txid = self._client.name_firstupdate(
            progress.name, progress.rand, progress.new_txid, progress.value
        )
        progress.activate_txid = txid
        return txid

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    def can_activate(self) -> bool:
        """Return True if the commit is confirmed and activation is still pending."""
        progress = self._require_progress()
        if progress.activate_txid is not None:
            return False
        return self._client.confirmations(progress.new_txid) >= ACTIVATION_DEPTH

    def is_finished(self) -> bool:
        """Return True once the activation transaction is confirmed."""
        progress = self._require_progress()
        if progress.activate_txid is None:
            return False
        return self._client.confirmations(progress.activate_txid) >= FINISHED_DEPTH

    @property
    def name(self) -> str:
        return self._require_progress().name

    @property
    def progress(self) -> RegistrationProgress:
        return self._require_progress()

    # ------------------------------------------------------------------
    # Payload encoding
    # ------------------------------------------------------------------

    def dump(self) -> str:
        """Return the registration payload text for persistence."""
        return self._require_progress().model_dump_json()

    @classmethod
    def load(cls, client: RegistryClient, payload: str) -> "NameRegistration":
        """Rebuild a registration from payload text produced by :meth:`dump`.

        Raises
        ------
        PayloadDecodeError
            If *payload* is not a valid registration payload.
        """
        try:
            progress = RegistrationProgress.model_validate_json(payload)
        except ValidationError as exc:
            raise PayloadDecodeError(f"Invalid registration payload: {exc}") from exc
        return cls(client, progress)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_progress(self) -> RegistrationProgress:
        if self._progress is None:
            raise RegistrationStateError("Registration has not been started.")
        return self._progress

    def __repr__(self) -> str:
        if self._progress is None:
            return "NameRegistration(<not started>)"
        return f"NameRegistration(name={self._progress.name!r})"


__all__ = ["NameRegistration", "RegistrationProgress"]
