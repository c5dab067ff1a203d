"""Tests for name_attestation.registry.registration — NameRegistration."""
from __future__ import annotations

import pytest

from name_attestation.errors import PayloadDecodeError, RegistrationStateError
from name_attestation.registry.client import ACTIVATION_DEPTH
from name_attestation.registry.local import LocalNameRegistry
from name_attestation.registry.registration import NameRegistration, RegistrationProgress


@pytest.fixture()
def registry() -> LocalNameRegistry:
    return LocalNameRegistry()


@pytest.fixture()
def registration(registry: LocalNameRegistry) -> NameRegistration:
    reg = NameRegistration(registry)
    reg.register_name("ot/abc123")
    return reg


class TestRegisterName:
    def test_records_commit(self, registration: NameRegistration) -> None:
        progress = registration.progress
        assert progress.name == "ot/abc123"
        assert progress.new_txid
        assert progress.rand
        assert progress.activate_txid is None
        assert progress.value == ""

    def test_name_property(self, registration: NameRegistration) -> None:
        assert registration.name == "ot/abc123"

    def test_second_register_raises(self, registration: NameRegistration) -> None:
        with pytest.raises(RegistrationStateError):
            registration.register_name("ot/other")

    def test_unstarted_registration_raises_on_access(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(RegistrationStateError):
            NameRegistration(registry).can_activate()


class TestReadiness:
    def test_not_activatable_before_depth(
        self, registry: LocalNameRegistry, registration: NameRegistration
    ) -> None:
        registry.mine(ACTIVATION_DEPTH - 1)
        assert not registration.can_activate()
        assert not registration.is_finished()

    def test_activatable_at_depth(
        self, registry: LocalNameRegistry, registration: NameRegistration
    ) -> None:
        registry.mine(ACTIVATION_DEPTH)
        assert registration.can_activate()
        assert not registration.is_finished()

    def test_activate_too_early_raises(self, registration: NameRegistration) -> None:
        with pytest.raises(RegistrationStateError):
            registration.activate()

    def test_activate_then_finish(
        self, registry: LocalNameRegistry, registration: NameRegistration
    ) -> None:
        registry.mine(ACTIVATION_DEPTH)
        txid = registration.activate()
        assert registration.progress.activate_txid == txid
        assert not registration.can_activate()
        assert not registration.is_finished()

        registry.mine(1)
        assert registration.is_finished()
        assert registry.name_show("ot/abc123") is not None


class TestPayload:
    def test_dump_load_preserves_progress(
        self, registry: LocalNameRegistry, registration: NameRegistration
    ) -> None:
        registry.mine(ACTIVATION_DEPTH)
        registration.activate()
        restored = NameRegistration.load(registry, registration.dump())
        assert restored.progress == registration.progress

    def test_restored_registration_can_activate(
        self, registry: LocalNameRegistry, registration: NameRegistration
    ) -> None:
        restored = NameRegistration.load(registry, registration.dump())
        registry.mine(ACTIVATION_DEPTH)
        restored.activate()
        registry.mine(1)
        assert restored.is_finished()

    def test_dump_is_json_text(self, registration: NameRegistration) -> None:
        assert RegistrationProgress.model_validate_json(registration.dump()).name == "ot/abc123"

    @pytest.mark.parametrize("payload", ["", "not json", "{}", '{"name": 5}'])
    def test_invalid_payload_raises(self, registry: LocalNameRegistry, payload: str) -> None:
        with pytest.raises(PayloadDecodeError):
            NameRegistration.load(registry, payload)
