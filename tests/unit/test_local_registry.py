"""Tests for name_attestation.registry.local — LocalNameRegistry."""
from __future__ import annotations

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from name_attestation.errors import (
    NoPrivateKeyError,
    RegistryTransportError,
    WrongPassphraseError,
)
from name_attestation.registry.client import ACTIVATION_DEPTH
from name_attestation.registry.local import LocalNameRegistry


@pytest.fixture()
def registry() -> LocalNameRegistry:
    return LocalNameRegistry()


def _activate(registry: LocalNameRegistry, name: str, value: str = "") -> str:
    txid, rand = registry.name_new(name)
    registry.mine(ACTIVATION_DEPTH)
    return registry.name_firstupdate(name, rand, txid, value)


# ---------------------------------------------------------------------------
# Chain and confirmations
# ---------------------------------------------------------------------------


class TestConfirmations:
    def test_new_transaction_has_zero_confirmations(self, registry: LocalNameRegistry) -> None:
        txid, _ = registry.name_new("ot/abc")
        assert registry.confirmations(txid) == 0

    def test_mining_adds_confirmations(self, registry: LocalNameRegistry) -> None:
        txid, _ = registry.name_new("ot/abc")
        registry.mine(3)
        assert registry.confirmations(txid) == 3

    def test_mine_returns_height(self, registry: LocalNameRegistry) -> None:
        assert registry.mine(2) == 2
        assert registry.height == 2

    def test_negative_mine_raises(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(ValueError):
            registry.mine(-1)

    def test_unknown_txid_raises(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(RegistryTransportError):
            registry.confirmations("deadbeef")


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class TestNames:
    def test_name_not_visible_before_activation(self, registry: LocalNameRegistry) -> None:
        registry.name_new("ot/abc")
        assert registry.name_show("ot/abc") is None

    def test_activation_requires_depth(self, registry: LocalNameRegistry) -> None:
        txid, rand = registry.name_new("ot/abc")
        registry.mine(ACTIVATION_DEPTH - 1)
        with pytest.raises(RegistryTransportError):
            registry.name_firstupdate("ot/abc", rand, txid)

    def test_activation_creates_owned_entry(self, registry: LocalNameRegistry) -> None:
        _activate(registry, "ot/abc", value="hello")
        entry = registry.name_show("ot/abc")
        assert entry is not None
        assert entry.value == "hello"
        assert registry.owns(entry.address)

    def test_activation_with_wrong_rand_fails(self, registry: LocalNameRegistry) -> None:
        txid, _ = registry.name_new("ot/abc")
        registry.mine(ACTIVATION_DEPTH)
        with pytest.raises(RegistryTransportError):
            registry.name_firstupdate("ot/abc", "00", txid)

    def test_second_activation_of_same_name_fails(self, registry: LocalNameRegistry) -> None:
        first_tx, first_rand = registry.name_new("ot/abc")
        second_tx, second_rand = registry.name_new("ot/abc")
        registry.mine(ACTIVATION_DEPTH)
        registry.name_firstupdate("ot/abc", first_rand, first_tx)
        with pytest.raises(RegistryTransportError):
            registry.name_firstupdate("ot/abc", second_rand, second_tx)

    def test_query_name_uses_namespace(self, registry: LocalNameRegistry) -> None:
        _activate(registry, "ot/abc")
        entry = registry.query_name("ot", "abc")
        assert entry is not None
        assert entry.name == "ot/abc"

    def test_update_sets_value_and_address(self, registry: LocalNameRegistry) -> None:
        _activate(registry, "ot/abc")
        target = registry.new_address()
        registry.name_update("ot/abc", "new", to_address=target)
        entry = registry.name_show("ot/abc")
        assert entry is not None
        assert entry.value == "new"
        assert entry.address == target

    def test_update_unknown_name_fails(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(RegistryTransportError):
            registry.name_update("ot/missing", "x")

    def test_update_without_owner_key_raises_no_private_key(
        self, registry: LocalNameRegistry
    ) -> None:
        _activate(registry, "ot/abc")
        entry = registry.name_show("ot/abc")
        assert entry is not None
        registry.forget_address(entry.address)
        with pytest.raises(NoPrivateKeyError):
            registry.name_update("ot/abc", "x")

    def test_update_to_invalid_address_fails(self, registry: LocalNameRegistry) -> None:
        _activate(registry, "ot/abc")
        with pytest.raises(RegistryTransportError):
            registry.name_update("ot/abc", "x", to_address="not-an-address")


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


class TestWallet:
    def test_unencrypted_wallet_needs_no_passphrase(self, registry: LocalNameRegistry) -> None:
        assert not registry.need_wallet_passphrase()

    def test_encrypt_locks_wallet(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        assert registry.encrypted
        assert registry.need_wallet_passphrase()

    def test_encrypt_twice_fails(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        with pytest.raises(RegistryTransportError):
            registry.encrypt_wallet("other")

    def test_empty_passphrase_rejected(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(ValueError):
            registry.encrypt_wallet("")

    def test_wrong_passphrase_raises(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        with pytest.raises(WrongPassphraseError):
            registry.unlock_wallet("wrong")
        assert registry.need_wallet_passphrase()

    def test_passphrase_digest_is_pbkdf2_sha256(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        wallet = registry.to_dict()["wallet"]
        assert isinstance(wallet, dict)
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=bytes.fromhex(wallet["passphrase_salt"]),
            iterations=100_000,
        )
        kdf.verify(b"secret", bytes.fromhex(wallet["passphrase_digest"]))

    def test_unlock_and_lock(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        registry.unlock_wallet("secret")
        assert not registry.need_wallet_passphrase()
        registry.lock_wallet()
        assert registry.need_wallet_passphrase()

    def test_locked_wallet_rejects_spend(self, registry: LocalNameRegistry) -> None:
        registry.encrypt_wallet("secret")
        with pytest.raises(RegistryTransportError) as exc_info:
            registry.name_new("ot/abc")
        assert exc_info.value.code == -13

    def test_locked_wallet_rejects_signing(self, registry: LocalNameRegistry) -> None:
        address = registry.new_address()
        registry.encrypt_wallet("secret")
        with pytest.raises(RegistryTransportError):
            registry.address(address).sign_message("abc")

    def test_forget_unknown_address_raises(self, registry: LocalNameRegistry) -> None:
        with pytest.raises(KeyError):
            registry.forget_address("Nnothere")


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


class TestLocalAddress:
    def test_new_address_is_valid_and_mine(self, registry: LocalNameRegistry) -> None:
        address = registry.address(registry.new_address())
        assert address.is_valid()
        assert address.is_mine()

    def test_foreign_address_is_not_mine(self, registry: LocalNameRegistry) -> None:
        other = LocalNameRegistry()
        address = registry.address(other.new_address())
        assert address.is_valid()
        assert not address.is_mine()

    def test_signing_foreign_address_raises(self, registry: LocalNameRegistry) -> None:
        other = LocalNameRegistry()
        with pytest.raises(NoPrivateKeyError):
            registry.address(other.new_address()).sign_message("abc")

    def test_signature_verifies_through_any_registry(self, registry: LocalNameRegistry) -> None:
        source = registry.new_address()
        signature = registry.address(source).sign_message("abc123")
        assert LocalNameRegistry().address(source).verify_signature("abc123", signature)

    def test_str_is_address_string(self, registry: LocalNameRegistry) -> None:
        source = registry.new_address()
        assert str(registry.address(source)) == source


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_round_trip_through_file(self, registry: LocalNameRegistry, tmp_path: Path) -> None:
        _activate(registry, "ot/abc", value="v")
        source = registry.new_address()
        path = tmp_path / "chain.json"
        registry.save(path)

        loaded = LocalNameRegistry.load(path)
        assert loaded.height == registry.height
        assert loaded.name_show("ot/abc") == registry.name_show("ot/abc")
        assert loaded.owns(source)

    def test_pending_commit_survives_reload(
        self, registry: LocalNameRegistry, tmp_path: Path
    ) -> None:
        txid, rand = registry.name_new("ot/abc")
        path = tmp_path / "chain.json"
        registry.save(path)

        loaded = LocalNameRegistry.load(path)
        loaded.mine(ACTIVATION_DEPTH)
        loaded.name_firstupdate("ot/abc", rand, txid)
        assert loaded.name_show("ot/abc") is not None

    def test_encrypted_wallet_loads_locked(
        self, registry: LocalNameRegistry, tmp_path: Path
    ) -> None:
        registry.encrypt_wallet("secret")
        registry.unlock_wallet("secret")
        path = tmp_path / "chain.json"
        registry.save(path)

        loaded = LocalNameRegistry.load(path)
        assert loaded.need_wallet_passphrase()
        loaded.unlock_wallet("secret")
        assert not loaded.need_wallet_passphrase()

    def test_missing_file_gives_empty_registry(self, tmp_path: Path) -> None:
        loaded = LocalNameRegistry.load(tmp_path / "absent.json")
        assert loaded.height == 0
        assert not loaded.encrypted
