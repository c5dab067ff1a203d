"""Tests for name_attestation.cli.main — CLI commands via Click test runner."""
from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from name_attestation import __version__
from name_attestation.cli.main import cli
from name_attestation.registry.client import ACTIVATION_DEPTH


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def home(tmp_path: Path) -> Path:
    return tmp_path / "home"


def _invoke(runner: CliRunner, home: Path, *args: str, input: str | None = None) -> Result:
    return runner.invoke(cli, ["--home", str(home), *args], input=input)


def _new_source(runner: CliRunner, home: Path, identity_ref: str = "N1") -> str:
    result = _invoke(runner, home, "wallet", "new-address")
    assert result.exit_code == 0, result.output
    address = result.output.strip().splitlines()[-1]
    result = _invoke(runner, home, "identity", "set-source", identity_ref, address)
    assert result.exit_code == 0, result.output
    return address


# ---------------------------------------------------------------------------
# Root CLI
# ---------------------------------------------------------------------------


class TestRootCLI:
    def test_help_exits_zero(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "register" in result.output

    def test_version_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_command(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_config_exits_one(self, runner: CliRunner, home: Path) -> None:
        home.mkdir(parents=True)
        (home / "config.json").write_text('{"tick_interval_seconds": -1}', encoding="utf-8")
        result = _invoke(runner, home, "status")
        assert result.exit_code == 1
        assert "invalid configuration" in result.output


# ---------------------------------------------------------------------------
# Lifecycle commands
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_status_empty(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "status")
        assert result.exit_code == 0
        assert "No bindings recorded" in result.output

    def test_register_shows_name(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "register", "N1", "abc123")
        assert result.exit_code == 0, result.output
        assert "ot/abc123" in result.output
        assert (home / "bindings.db").exists()
        assert (home / "chain.json").exists()

    def test_tick_with_nothing_ready(self, runner: CliRunner, home: Path) -> None:
        _invoke(runner, home, "register", "N1", "abc123")
        result = _invoke(runner, home, "tick")
        assert result.exit_code == 0
        assert "Nothing to do" in result.output

    def test_full_lifecycle_then_verify(self, runner: CliRunner, home: Path) -> None:
        source = _new_source(runner, home)
        assert _invoke(runner, home, "register", "N1", "abc123").exit_code == 0

        _invoke(runner, home, "chain", "mine", "-n", str(ACTIVATION_DEPTH))
        result = _invoke(runner, home, "tick")
        assert result.exit_code == 0
        assert "Activated ot/abc123" in result.output

        _invoke(runner, home, "chain", "mine")
        result = _invoke(runner, home, "tick")
        assert result.exit_code == 0
        assert "Updated ot/abc123" in result.output

        result = _invoke(runner, home, "verify", "abc123", source)
        assert result.exit_code == 0, result.output
        assert "VALID" in result.output

        result = _invoke(runner, home, "status")
        assert "ot/abc123" in result.output

        result = _invoke(runner, home, "chain", "show", "ot/abc123")
        assert result.exit_code == 0
        assert source in result.output

    def test_run_with_max_ticks(self, runner: CliRunner, home: Path) -> None:
        _invoke(runner, home, "register", "N1", "abc123")
        result = _invoke(runner, home, "run", "--interval", "0.01", "--max-ticks", "2")
        assert result.exit_code == 0
        assert result.output.count("Nothing to do") == 2

    def test_run_rejects_bad_interval(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "run", "--interval", "-1", "--max-ticks", "1")
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# Verification failures
# ---------------------------------------------------------------------------


class TestVerify:
    def test_unregistered_is_invalid(self, runner: CliRunner, home: Path) -> None:
        source = _new_source(runner, home)
        result = _invoke(runner, home, "verify", "abc123", source)
        assert result.exit_code == 1
        assert "not_found" in result.output

    def test_empty_hash_is_invalid(self, runner: CliRunner, home: Path) -> None:
        source = _new_source(runner, home)
        result = _invoke(runner, home, "verify", "", source)
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "not_found" in result.output

    def test_chain_show_missing_name(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "chain", "show", "ot/missing")
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# Encrypted wallet
# ---------------------------------------------------------------------------


class TestEncryptedWallet:
    def test_encrypt_then_register_prompts(self, runner: CliRunner, home: Path) -> None:
        result = _invoke(runner, home, "wallet", "encrypt", "--passphrase", "secret")
        assert result.exit_code == 0, result.output

        result = _invoke(runner, home, "register", "N1", "abc123", input="wrong\nsecret\n")
        assert result.exit_code == 0, result.output
        assert "wallet is locked" in result.output

    def test_cancelled_prompt_aborts_registration(self, runner: CliRunner, home: Path) -> None:
        _invoke(runner, home, "wallet", "encrypt", "--passphrase", "secret")
        result = _invoke(runner, home, "register", "N1", "abc123", input="")
        assert result.exit_code == 1

        status = _invoke(runner, home, "status")
        assert "No bindings recorded" in status.output

    def test_cancelled_tick_is_reported(self, runner: CliRunner, home: Path) -> None:
        _invoke(runner, home, "register", "N1", "abc123")
        _invoke(runner, home, "wallet", "encrypt", "--passphrase", "secret")
        _invoke(runner, home, "chain", "mine", "-n", str(ACTIVATION_DEPTH))

        result = _invoke(runner, home, "tick", input="")
        assert result.exit_code == 0
        assert "Tick aborted" in result.output

    def test_encrypt_twice_fails(self, runner: CliRunner, home: Path) -> None:
        _invoke(runner, home, "wallet", "encrypt", "--passphrase", "secret")
        result = _invoke(runner, home, "wallet", "encrypt", "--passphrase", "other")
        assert result.exit_code == 1
