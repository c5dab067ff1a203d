"""PendingLedger — the in-flight name bindings.

The ledger mirrors, in memory, every persisted binding that has a
registration payload and is not yet active. It is rebuilt from the store
when constructed, so a restarted process resumes each registration where
the previous one left it.

Bindings enter the ledger through :meth:`PendingLedger.start_registration`
and leave it when the reconciliation loop finishes them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from name_attestation.errors import OperationFailure, PayloadDecodeError
from name_attestation.naming import NAMESPACE, derive_name
from name_attestation.registry.client import RegistryClient
from name_attestation.registry.registration import NameRegistration
from name_attestation.store.base import BindingRow, BindingStore
from name_attestation.unlock import UnlockCoordinator, UnlockOutcome

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Where a binding stands in its registration lifecycle.

    REGISTERING
        Waiting for confirmations (of the commit, or of the activation).
    ACTIVATABLE
        The commit is confirmed; the activation can be sent.
    FINISHED
        The activation is confirmed; the attestation update can be sent.
    ACTIVE
        Processed and removed from the ledger.
    """

    REGISTERING = "registering"
    ACTIVATABLE = "activatable"
    FINISHED = "finished"
    ACTIVE = "active"


@dataclass(eq=False)
class NameBinding:
    """A credential fingerprint on its way to being attested at *name*.

    Parameters
    ----------
    name:
        Registry name, derived from the namespace and *credential_hash*.
    identity_ref:
        Opaque reference to the owning identity.
    credential_hash:
        Fingerprint being attested.
    registration:
        Registry-side registration progress.
    lifecycle_state:
        Last state assigned by the reconciliation loop.
    update_txid:
        Attestation update transaction, once issued.
    """

    name: str
    identity_ref: str
    credential_hash: str
    registration: NameRegistration
    lifecycle_state: LifecycleState = LifecycleState.REGISTERING
    update_txid: Optional[str] = None

    @property
    def reg_payload(self) -> str:
        """Serialized registration progress."""
        return self.registration.dump()

    def sample_state(self) -> LifecycleState:
        """Ask the registry where this binding stands. Does not modify the binding."""
        if self.registration.is_finished():
            return LifecycleState.FINISHED
        if self.registration.can_activate():
            return LifecycleState.ACTIVATABLE
        return LifecycleState.REGISTERING


class PendingLedger:
    """In-memory ledger of pending bindings backed by a :class:`BindingStore`.

    Parameters
    ----------
    client:
        Registry client for the registration transactions.
    store:
        Persistent store of binding rows. Pending rows are loaded on
        construction.
    unlocker:
        Coordinator used to unlock the wallet before registering.
    namespace:
        Registry namespace for derived names.
    """

    def __init__(
        self,
        client: RegistryClient,
        store: BindingStore,
        unlocker: UnlockCoordinator,
        namespace: str = NAMESPACE,
    ) -> None:
        self._client = client
        self._store = store
        self._unlocker = unlocker
        self._namespace = namespace
        self._bindings: list[NameBinding] = []
        self._reload()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def start_registration(
        self, identity_ref: str, credential_hash: str
    ) -> NameBinding | None:
        """Begin registering *credential_hash* for *identity_ref*.

        Unlocks the wallet, sends the commit transaction, persists a new row
        and adds the binding to the ledger. Identical calls are not
        deduplicated: each one creates its own row.

        Returns
        -------
        NameBinding or None
            The new binding, or ``None`` if the unlock was cancelled or any
            step failed. Failures are logged, never raised.
        """
        logger.info(
            "Registering %r with credentials %r in the registry.",
            identity_ref,
            credential_hash,
        )
        name: str | None = None
        try:
            name = derive_name(self._namespace, credential_hash)

            outcome = self._unlocker.unlock()
            if outcome is not UnlockOutcome.UNLOCKED:
                logger.info("Unlock %s, registration of %r aborted.", outcome.value, name)
                return None

            registration = NameRegistration(self._client)
            registration.register_name(name)

            self._store.insert(
                BindingRow(
                    name=name,
                    identity_ref=identity_ref,
                    credential_hash=credential_hash,
                    active=False,
                    reg_payload=registration.dump(),
                )
            )

            binding = NameBinding(
                name=name,
                identity_ref=identity_ref,
                credential_hash=credential_hash,
                registration=registration,
            )
            self._bindings.append(binding)
            return binding
        except Exception as exc:
            OperationFailure.from_exception("start_registration", name, exc).log(logger)
            return None

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def bindings(self) -> list[NameBinding]:
        """Return a snapshot of the pending bindings."""
        return list(self._bindings)

    def remove(self, binding: NameBinding) -> None:
        """Drop *binding* from the ledger. Other bindings with the same name stay.

        Raises
        ------
        ValueError
            If *binding* is not in the ledger.
        """
        remaining = [b for b in self._bindings if b is not binding]
        if len(remaining) == len(self._bindings):
            raise ValueError(f"Binding for {binding.name!r} is not in the ledger")
        self._bindings = remaining

    @property
    def namespace(self) -> str:
        return self._namespace

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[NameBinding]:
        return iter(self.bindings())

    def __contains__(self, binding: object) -> bool:
        return any(b is binding for b in self._bindings)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _reload(self) -> None:
        logger.info("Loading pending name registrations.")
        for row in self._store.pending_rows():
            try:
                registration = NameRegistration.load(self._client, row.reg_payload or "")
            except PayloadDecodeError as exc:
                OperationFailure.from_exception("reload", row.name, exc).log(logger)
                continue
            self._bindings.append(
                NameBinding(
                    name=row.name,
                    identity_ref=row.identity_ref,
                    credential_hash=row.credential_hash,
                    registration=registration,
                    update_txid=row.update_txid,
                )
            )
            logger.info("  %s", row.name)


__all__ = ["LifecycleState", "NameBinding", "PendingLedger"]
