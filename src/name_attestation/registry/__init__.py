"""Name registry access.

Provides the :class:`RegistryClient` interface the orchestrator consumes,
the :class:`NameRegistration` progress tracker, and
:class:`LocalNameRegistry`, an in-process registry with a wallet.

Quick start
-----------
::

    from name_attestation.registry import LocalNameRegistry, NameRegistration

    registry = LocalNameRegistry()
    registration = NameRegistration(registry)
    registration.register_name("ot/abc123")
    registry.mine(12)
    registration.activate()
"""
from __future__ import annotations

from name_attestation.registry.client import (
    ACTIVATION_DEPTH,
    FINISHED_DEPTH,
    Address,
    NameEntry,
    RegistryClient,
)
from name_attestation.registry.local import LocalAddress, LocalNameRegistry
from name_attestation.registry.registration import NameRegistration, RegistrationProgress

__all__ = [
    "ACTIVATION_DEPTH",
    "FINISHED_DEPTH",
    "Address",
    "LocalAddress",
    "LocalNameRegistry",
    "NameEntry",
    "NameRegistration",
    "RegistrationProgress",
    "RegistryClient",
]
