"""name-attestation — bind credential fingerprints to name registry entries.

A credential fingerprint is registered at ``"ot/<fingerprint>"`` in a
Namecoin-style name registry, sent to the owning identity's source address
and signed by it. Anyone can then verify the credential by querying the
registry instead of trusting a central issuer.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import name_attestation
>>> name_attestation.__version__
'0.1.0'

Quick start
-----------
::

    from name_attestation import (
        AttestationService, LocalNameRegistry, InMemoryBindingStore,
        StaticSourceDirectory, Verifier,
    )
"""
from __future__ import annotations

__version__: str = "0.1.0"

from name_attestation.errors import (
    AttestationError,
    BindingNotFoundError,
    NoPrivateKeyError,
    OperationFailure,
    PayloadDecodeError,
    PersistenceError,
    RegistrationStateError,
    RegistryError,
    RegistryTransportError,
    WrongPassphraseError,
)
from name_attestation.naming import NAMESPACE, derive_name

# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------
from name_attestation.registry import (
    ACTIVATION_DEPTH,
    FINISHED_DEPTH,
    Address,
    LocalNameRegistry,
    NameEntry,
    NameRegistration,
    RegistrationProgress,
    RegistryClient,
)

# ------------------------------------------------------------------
# Persistence and identities
# ------------------------------------------------------------------
from name_attestation.store import (
    BindingRow,
    BindingStore,
    InMemoryBindingStore,
    SqliteBindingStore,
)
from name_attestation.identity import IdentitySourceDirectory, StaticSourceDirectory

# ------------------------------------------------------------------
# Orchestration
# ------------------------------------------------------------------
from name_attestation.unlock import SecretPrompt, UnlockCoordinator, UnlockOutcome
from name_attestation.ledger import LifecycleState, NameBinding, PendingLedger
from name_attestation.update import NameUpdater
from name_attestation.reconcile import ReconciliationLoop, TickReport
from name_attestation.scheduler import TickScheduler
from name_attestation.verifier import VerificationReason, VerificationResult, Verifier
from name_attestation.service import AttestationService
from name_attestation.config import AttestationConfig, load_config

__all__ = [
    # version
    "__version__",
    # errors
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
    # naming
    "NAMESPACE",
    "derive_name",
    # registry
    "ACTIVATION_DEPTH",
    "FINISHED_DEPTH",
    "Address",
    "LocalNameRegistry",
    "NameEntry",
    "NameRegistration",
    "RegistrationProgress",
    "RegistryClient",
    # persistence and identities
    "BindingRow",
    "BindingStore",
    "IdentitySourceDirectory",
    "InMemoryBindingStore",
    "SqliteBindingStore",
    "StaticSourceDirectory",
    # orchestration
    "AttestationConfig",
    "AttestationService",
    "LifecycleState",
    "NameBinding",
    "NameUpdater",
    "PendingLedger",
    "ReconciliationLoop",
    "SecretPrompt",
    "TickReport",
    "TickScheduler",
    "UnlockCoordinator",
    "UnlockOutcome",
    "VerificationReason",
    "VerificationResult",
    "Verifier",
    "load_config",
]
