"""Tests for name_attestation.errors — hierarchy and OperationFailure."""
from __future__ import annotations

import logging

import pytest

from name_attestation.errors import (
    AttestationError,
    BindingNotFoundError,
    NoPrivateKeyError,
    OperationFailure,
    PayloadDecodeError,
    RegistryError,
    RegistryTransportError,
    WrongPassphraseError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            RegistryTransportError(-13, "locked"),
            NoPrivateKeyError("Naddr"),
            WrongPassphraseError("wrong"),
        ],
    )
    def test_registry_errors(self, exc: Exception) -> None:
        assert isinstance(exc, RegistryError)
        assert isinstance(exc, AttestationError)

    def test_transport_error_fields(self) -> None:
        exc = RegistryTransportError(-13, "wallet locked")
        assert exc.code == -13
        assert exc.message == "wallet locked"
        assert "-13" in str(exc)

    def test_payload_error_is_value_error(self) -> None:
        assert issubclass(PayloadDecodeError, ValueError)

    def test_binding_not_found_is_key_error(self) -> None:
        exc = BindingNotFoundError("ot/abc")
        assert isinstance(exc, KeyError)
        assert exc.name == "ot/abc"


class TestOperationFailure:
    def test_from_exception(self) -> None:
        failure = OperationFailure.from_exception("activate", "ot/abc", RuntimeError("boom"))
        assert failure.operation == "activate"
        assert failure.name == "ot/abc"
        assert failure.error_type == "RuntimeError"
        assert failure.message == "boom"

    def test_log_emits_single_error(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("test.failures")
        failure = OperationFailure.from_exception("scan", None, ValueError("bad"))
        with caplog.at_level(logging.ERROR, logger="test.failures"):
            failure.log(logger)
        assert len(caplog.records) == 1
        assert "scan failed" in caplog.records[0].getMessage()
        assert "ValueError" in caplog.records[0].getMessage()
