#!/usr/bin/env python3
"""Example: Attestation lifecycle

Registers a credential fingerprint for an identity on an in-process
registry, mines blocks until the registration finishes, and verifies the
resulting attestation.

Usage:
    python examples/01_lifecycle.py

Requirements:
    pip install name-attestation
"""
from __future__ import annotations

import name_attestation
from name_attestation import (
    ACTIVATION_DEPTH,
    AttestationService,
    InMemoryBindingStore,
    LocalNameRegistry,
    SecretPrompt,
    StaticSourceDirectory,
)


class FixedPrompt(SecretPrompt):
    """Always answers with the same passphrase."""

    def __init__(self, passphrase: str) -> None:
        self._passphrase = passphrase

    def ask(self, message: str) -> str | None:
        print(f"[prompt] {message}")
        return self._passphrase


def main() -> None:
    print(f"name-attestation version: {name_attestation.__version__}")

    # Step 1: Set up a registry with an encrypted wallet and a source address
    registry = LocalNameRegistry()
    source = registry.new_address()
    registry.encrypt_wallet("correct horse")
    print(f"Identity source address: {source}")

    service = AttestationService(
        client=registry,
        store=InMemoryBindingStore(),
        sources=StaticSourceDirectory({"N1": source}),
        prompt=FixedPrompt("correct horse"),
    )

    # Step 2: Start the registration
    binding = service.start_registration("N1", "abc123")
    if binding is None:
        print("Registration failed.")
        return
    print(f"Registering {binding.name}")

    # Step 3: Confirm the commit, then activate
    registry.lock_wallet()
    registry.mine(ACTIVATION_DEPTH)
    report = service.tick()
    print(f"Activated: {report.activated}")

    # Step 4: Confirm the activation, then issue the attestation update
    registry.mine(1)
    report = service.tick()
    print(f"Finished: {report.finished}, updated: {report.updated}")

    # Step 5: Verify
    result = service.check("abc123", source)
    print(f"Verification: {result.reason.value}")

    print("\nLifecycle complete.")


if __name__ == "__main__":
    main()
