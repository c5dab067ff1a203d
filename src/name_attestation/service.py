"""Wiring of the attestation components into one service.

Example
-------
::

    from name_attestation import AttestationService, LocalNameRegistry
    from name_attestation import InMemoryBindingStore, StaticSourceDirectory

    registry = LocalNameRegistry()
    source = registry.new_address()
    service = AttestationService(
        client=registry,
        store=InMemoryBindingStore(),
        sources=StaticSourceDirectory({"N1": source}),
        prompt=my_prompt,
    )
    service.start_registration("N1", "abc123")
    service.tick()
"""
from __future__ import annotations

from name_attestation.identity import IdentitySourceDirectory
from name_attestation.ledger import NameBinding, PendingLedger
from name_attestation.naming import NAMESPACE
from name_attestation.reconcile import ReconciliationLoop, TickReport
from name_attestation.registry.client import RegistryClient
from name_attestation.scheduler import TickScheduler
from name_attestation.store.base import BindingStore
from name_attestation.unlock import SecretPrompt, UnlockCoordinator
from name_attestation.update import NameUpdater
from name_attestation.verifier import VerificationResult, Verifier


class AttestationService:
    """One registry, one store, one ledger and the loop that drives it.

    Constructing the service reloads the pending ledger from *store*.

    Parameters
    ----------
    client:
        Registry client.
    store:
        Binding store.
    sources:
        Identity source directory used by the update operation.
    prompt:
        Secret prompt used when the wallet is locked.
    namespace:
        Registry namespace for attestation names.
    """

    def __init__(
        self,
        client: RegistryClient,
        store: BindingStore,
        sources: IdentitySourceDirectory,
        prompt: SecretPrompt,
        namespace: str = NAMESPACE,
    ) -> None:
        self.store = store
        self.unlocker = UnlockCoordinator(client, prompt)
        self.ledger = PendingLedger(client, store, self.unlocker, namespace)
        self.updater = NameUpdater(client, store, sources, namespace)
        self.loop = ReconciliationLoop(self.ledger, store, self.unlocker, self.updater)
        self.verifier = Verifier(client, namespace)

    def start_registration(self, identity_ref: str, credential_hash: str) -> NameBinding | None:
        return self.ledger.start_registration(identity_ref, credential_hash)

    def tick(self) -> TickReport:
        return self.loop.tick()

    def verify(self, credential_hash: str, claimed_source: str) -> bool:
        return self.verifier.verify(credential_hash, claimed_source)

    def check(self, credential_hash: str, claimed_source: str) -> VerificationResult:
        return self.verifier.check(credential_hash, claimed_source)

    def scheduler(self, interval: float) -> TickScheduler:
        """Return a scheduler that ticks this service every *interval* seconds."""
        return TickScheduler(self.loop.tick, interval)


__all__ = ["AttestationService"]
