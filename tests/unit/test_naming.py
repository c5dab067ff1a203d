"""Tests for name_attestation.naming — derive_name."""
from __future__ import annotations

import pytest

from name_attestation.naming import NAMESPACE, derive_name


class TestDeriveName:
    def test_default_namespace_is_ot(self) -> None:
        assert NAMESPACE == "ot"

    def test_joins_namespace_and_hash(self) -> None:
        assert derive_name("ot", "abc123") == "ot/abc123"

    @pytest.mark.parametrize("credential_hash", ["abc123", "f" * 64, "0"])
    def test_repeated_calls_are_stable(self, credential_hash: str) -> None:
        first = derive_name(NAMESPACE, credential_hash)
        assert all(derive_name(NAMESPACE, credential_hash) == first for _ in range(5))

    def test_different_hashes_give_different_names(self) -> None:
        assert derive_name("ot", "aaa") != derive_name("ot", "bbb")

    def test_empty_namespace_raises(self) -> None:
        with pytest.raises(ValueError):
            derive_name("", "abc123")

    def test_empty_hash_raises(self) -> None:
        with pytest.raises(ValueError):
            derive_name("ot", "")
