"""CLI entry point for name-attestation.

Invoked as::

    name-attestation [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m name_attestation.cli.main

State lives in a home directory (``--home``): the SQLite binding store, the
local registry chain and the identity source directory.

Commands
--------
register        Start registering a credential fingerprint for an identity
tick            Run one reconciliation tick
run             Run reconciliation ticks at a fixed interval
status          List all persisted bindings
verify          Verify a credential fingerprint against a source address
identity        Manage identity source addresses
wallet          Manage the local wallet
chain           Inspect and advance the local chain
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from name_attestation import __version__
from name_attestation.config import AttestationConfig, load_config
from name_attestation.errors import AttestationError
from name_attestation.identity import StaticSourceDirectory
from name_attestation.reconcile import TickReport
from name_attestation.registry.local import LocalNameRegistry
from name_attestation.scheduler import TickScheduler
from name_attestation.service import AttestationService
from name_attestation.store.sqlite import SqliteBindingStore
from name_attestation.unlock import SecretPrompt
from name_attestation.verifier import Verifier

console = Console()

DEFAULT_HOME = Path.home() / ".name-attestation"


class TerminalSecretPrompt(SecretPrompt):
    """Asks for the wallet passphrase on the terminal. Ctrl-C or EOF cancels."""

    def ask(self, message: str) -> str | None:
        console.print(message)
        try:
            return click.prompt("Passphrase", hide_input=True)
        except click.Abort:
            return None


class Workspace:
    """Lazily opened state of one home directory."""

    def __init__(self, home: Path, config: AttestationConfig) -> None:
        self.home = home
        self.config = config
        self._registry: Optional[LocalNameRegistry] = None
        self._sources: Optional[StaticSourceDirectory] = None
        self._store: Optional[SqliteBindingStore] = None

    @property
    def registry(self) -> LocalNameRegistry:
        if self._registry is None:
            self._registry = LocalNameRegistry.load(self.config.chain_file)
        return self._registry

    @property
    def sources(self) -> StaticSourceDirectory:
        if self._sources is None:
            self._sources = StaticSourceDirectory.load(self.config.identities_file)
        return self._sources

    @property
    def store(self) -> SqliteBindingStore:
        if self._store is None:
            self._store = SqliteBindingStore(self.config.database_file)
        return self._store

    def service(self) -> AttestationService:
        return AttestationService(
            client=self.registry,
            store=self.store,
            sources=self.sources,
            prompt=TerminalSecretPrompt(),
            namespace=self.config.namespace,
        )

    def save_registry(self) -> None:
        self.registry.save(self.config.chain_file)

    def save_sources(self) -> None:
        self.sources.save(self.config.identities_file)


pass_workspace = click.make_pass_decorator(Workspace)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="name-attestation")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_HOME,
    show_default=True,
    help="Directory holding the binding store, chain and identity files.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Logging level (overrides the config file).",
)
@click.pass_context
def cli(ctx: click.Context, home: Path, log_level: str | None) -> None:
    """Attest credential fingerprints in a name registry"""
    try:
        config = load_config(home)
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] invalid configuration in {home}: {exc}")
        sys.exit(1)

    logging.basicConfig(level=getattr(logging, log_level or config.log_level))
    ctx.obj = Workspace(home, config)


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]name-attestation[/bold] v{__version__}")


# ------------------------------------------------------------------
# register / tick / run
# ------------------------------------------------------------------


@cli.command(name="register")
@click.argument("identity_ref")
@click.argument("credential_hash")
@pass_workspace
def register_command(workspace: Workspace, identity_ref: str, credential_hash: str) -> None:
    """Start registering CREDENTIAL_HASH for IDENTITY_REF."""
    binding = workspace.service().start_registration(identity_ref, credential_hash)
    workspace.save_registry()

    if binding is None:
        console.print("[red]Error:[/red] registration was not started (see log).")
        sys.exit(1)

    console.print(f"[green]Registration started[/green] for [bold]{binding.name}[/bold]")
    console.print(f"  Identity:   {binding.identity_ref}")
    console.print(f"  Credential: {binding.credential_hash}")


@cli.command(name="tick")
@pass_workspace
def tick_command(workspace: Workspace) -> None:
    """Run one reconciliation tick over the pending bindings."""
    report = workspace.service().tick()
    workspace.save_registry()
    _print_report(report)


@cli.command(name="run")
@click.option(
    "--interval",
    type=float,
    default=None,
    help="Seconds between ticks (defaults to the configured interval).",
)
@click.option("--max-ticks", type=int, default=None, help="Stop after this many ticks.")
@pass_workspace
def run_command(workspace: Workspace, interval: float | None, max_ticks: int | None) -> None:
    """Run reconciliation ticks at a fixed interval until interrupted."""
    service = workspace.service()

    def tick_and_save() -> None:
        report = service.tick()
        workspace.save_registry()
        _print_report(report)

    try:
        scheduler = TickScheduler(
            tick_and_save, interval or workspace.config.tick_interval_seconds
        )
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    try:
        scheduler.run(max_ticks=max_ticks)
    except KeyboardInterrupt:
        console.print("Stopped.")


# ------------------------------------------------------------------
# status / verify
# ------------------------------------------------------------------


@cli.command(name="status")
@pass_workspace
def status_command(workspace: Workspace) -> None:
    """List all persisted name bindings."""
    rows = workspace.store.rows()
    if not rows:
        console.print("No bindings recorded.")
        return

    table = Table(title="Name Bindings", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Identity")
    table.add_column("Active", justify="center")
    table.add_column("Pending", justify="center")
    table.add_column("Update Tx")

    for row in rows:
        table.add_row(
            row.name,
            row.identity_ref,
            "[green]yes[/green]" if row.active else "[red]no[/red]",
            "yes" if row.pending else "no",
            row.update_txid or "-",
        )
    console.print(table)


@cli.command(name="verify")
@click.argument("credential_hash")
@click.argument("source")
@pass_workspace
def verify_command(workspace: Workspace, credential_hash: str, source: str) -> None:
    """Verify that CREDENTIAL_HASH is attested by SOURCE.

    Exits with status 0 if the attestation is valid and 1 otherwise.
    """
    verifier = Verifier(workspace.registry, workspace.config.namespace)
    try:
        result = verifier.check(credential_hash, source)
    except AttestationError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    if result.valid:
        console.print(f"[green]VALID[/green] {result.name} is attested by {source}")
        return
    console.print(f"[red]INVALID[/red] {result.name}: {result.reason.value}")
    sys.exit(1)


# ------------------------------------------------------------------
# identity group
# ------------------------------------------------------------------


@cli.group(name="identity")
def identity_group() -> None:
    """Manage identity source addresses."""


@identity_group.command(name="set-source")
@click.argument("identity_ref")
@click.argument("address")
@pass_workspace
def set_source_command(workspace: Workspace, identity_ref: str, address: str) -> None:
    """Declare ADDRESS as the source of IDENTITY_REF."""
    workspace.sources.set_source(identity_ref, address)
    workspace.save_sources()
    console.print(f"Source of [bold]{identity_ref}[/bold] set to {address}")


# ------------------------------------------------------------------
# wallet group
# ------------------------------------------------------------------


@cli.group(name="wallet")
def wallet_group() -> None:
    """Manage the local wallet."""


@wallet_group.command(name="new-address")
@pass_workspace
def new_address_command(workspace: Workspace) -> None:
    """Create a new wallet address."""
    address = workspace.registry.new_address()
    workspace.save_registry()
    console.print(address)


@wallet_group.command(name="encrypt")
@click.password_option("--passphrase", prompt="New wallet passphrase")
@pass_workspace
def encrypt_command(workspace: Workspace, passphrase: str) -> None:
    """Encrypt the wallet with a passphrase."""
    try:
        workspace.registry.encrypt_wallet(passphrase)
    except (ValueError, AttestationError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    workspace.save_registry()
    console.print("[green]Wallet encrypted.[/green]")


# ------------------------------------------------------------------
# chain group
# ------------------------------------------------------------------


@cli.group(name="chain")
def chain_group() -> None:
    """Inspect and advance the local chain."""


@chain_group.command(name="mine")
@click.option("--blocks", "-n", type=click.IntRange(min=1), default=1, show_default=True)
@pass_workspace
def mine_command(workspace: Workspace, blocks: int) -> None:
    """Mine BLOCKS new blocks."""
    height = workspace.registry.mine(blocks)
    workspace.save_registry()
    console.print(f"Chain height is now {height}")


@chain_group.command(name="show")
@click.argument("name")
@pass_workspace
def show_command(workspace: Workspace, name: str) -> None:
    """Show the current entry of NAME."""
    entry = workspace.registry.name_show(name)
    if entry is None:
        console.print(f"[red]Error:[/red] name {name!r} is not active.")
        sys.exit(1)
    console.print(f"[bold]{entry.name}[/bold]")
    console.print(f"  Address: {entry.address}")
    console.print(f"  Value:   {entry.value or '(empty)'}")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _print_report(report: TickReport) -> None:
    if report.skipped:
        console.print("[yellow]Tick skipped:[/yellow] another tick is in progress.")
        return
    if report.cancelled and report.unlock is not None:
        console.print(f"[yellow]Tick aborted:[/yellow] unlock {report.unlock.value}.")
        return

    for name in report.activated:
        console.print(f"[green]Activated[/green] {name}")
    for name in report.finished:
        marker = "[green]Updated[/green]" if name in report.updated else "[red]Update failed[/red]"
        console.print(f"{marker} {name}")
    for failure in report.failures:
        console.print(
            f"[red]Failed[/red] {failure.operation} for {failure.name}: {failure.message}"
        )
    if not (report.activated or report.finished or report.failures):
        console.print("Nothing to do.")


if __name__ == "__main__":
    cli()
