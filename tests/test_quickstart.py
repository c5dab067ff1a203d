"""Test that the quickstart API works for name-attestation."""
from __future__ import annotations

from typing import Optional


def _service():
    from name_attestation import (
        AttestationService,
        InMemoryBindingStore,
        LocalNameRegistry,
        SecretPrompt,
        StaticSourceDirectory,
    )

    class NoPrompt(SecretPrompt):
        def ask(self, message: str) -> Optional[str]:
            return None

    registry = LocalNameRegistry()
    source = registry.new_address()
    service = AttestationService(
        client=registry,
        store=InMemoryBindingStore(),
        sources=StaticSourceDirectory({"N1": source}),
        prompt=NoPrompt(),
    )
    return registry, source, service


def test_quickstart_import() -> None:
    import name_attestation

    assert isinstance(name_attestation.__version__, str)


def test_quickstart_start_registration() -> None:
    _, _, service = _service()
    binding = service.start_registration("N1", "abc123")
    assert binding is not None
    assert binding.name == "ot/abc123"


def test_quickstart_full_cycle() -> None:
    from name_attestation import ACTIVATION_DEPTH

    registry, source, service = _service()
    service.start_registration("N1", "abc123")
    registry.mine(ACTIVATION_DEPTH)
    service.tick()
    registry.mine(1)
    report = service.tick()
    assert report.updated == ["ot/abc123"]
    assert service.verify("abc123", source)


def test_quickstart_scheduler() -> None:
    _, _, service = _service()
    scheduler = service.scheduler(interval=0.001)
    scheduler.run(max_ticks=1)
    assert scheduler.tick_count == 1


def test_quickstart_verify_unknown_is_false() -> None:
    _, source, service = _service()
    assert not service.verify("nothing", source)
