"""ReconciliationLoop — advances pending bindings one tick at a time.

Each tick has three phases:

1. **Scan.** Sample every binding's readiness from the registry without
   touching the binding.
2. **Unlock.** If any binding is activatable or finished, unlock the wallet
   once for the whole tick. A cancelled or failed unlock ends the tick with
   nothing changed.
3. **Advance.** Activate what can be activated; mark finished bindings
   active, issue their attestation update and drop them from the ledger.

Failures are isolated per binding and reported in the :class:`TickReport`;
``tick()`` itself never raises.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from name_attestation.errors import BindingNotFoundError, OperationFailure
from name_attestation.ledger import LifecycleState, NameBinding, PendingLedger
from name_attestation.store.base import BindingStore
from name_attestation.unlock import UnlockCoordinator, UnlockOutcome
from name_attestation.update import NameUpdater

logger = logging.getLogger(__name__)

_NEEDS_WALLET = (LifecycleState.ACTIVATABLE, LifecycleState.FINISHED)


@dataclass
class TickReport:
    """What one reconciliation tick did.

    Parameters
    ----------
    unlock:
        Outcome of the unlock phase, or ``None`` if no unlock was needed.
    activated:
        Names whose activation transaction was sent.
    finished:
        Names marked active and removed from the ledger.
    updated:
        Names whose attestation update was issued.
    failures:
        Per-binding failures absorbed during the tick.
    skipped:
        True if another tick was already running and this one did nothing.
    """

    unlock: Optional[UnlockOutcome] = None
    activated: list[str] = field(default_factory=list)
    finished: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    failures: list[OperationFailure] = field(default_factory=list)
    skipped: bool = False

    @property
    def cancelled(self) -> bool:
        """True if the unlock phase ran and did not unlock the wallet."""
        return self.unlock is not None and self.unlock is not UnlockOutcome.UNLOCKED


class ReconciliationLoop:
    """Drives pending bindings through activation and the attestation update.

    Parameters
    ----------
    ledger:
        The pending ledger to advance.
    store:
        Binding store shared with the ledger.
    unlocker:
        Coordinator for the batched per-tick unlock.
    updater:
        Update operation invoked for finished bindings.
    """

    def __init__(
        self,
        ledger: PendingLedger,
        store: BindingStore,
        unlocker: UnlockCoordinator,
        updater: NameUpdater,
    ) -> None:
        self._ledger = ledger
        self._store = store
        self._unlocker = unlocker
        self._updater = updater
        self._tick_lock = threading.Lock()

    def tick(self) -> TickReport:
        """Run one reconciliation pass. Overlapping calls are skipped."""
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Reconciliation tick already in progress, skipping.")
            return TickReport(skipped=True)
        try:
            return self._run_tick()
        finally:
            self._tick_lock.release()

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _run_tick(self) -> TickReport:
        logger.debug("Reconciliation tick started.")
        report = TickReport()

        sampled = self._scan(report)

        if any(state in _NEEDS_WALLET for _, state in sampled):
            logger.info("Need to unlock the wallet, trying to do it.")
            report.unlock = self._unlocker.unlock()
            if report.unlock is not UnlockOutcome.UNLOCKED:
                logger.info("Unlock %s, cancelling the tick.", report.unlock.value)
                return report
        else:
            logger.debug("No operations necessary that need an unlocked wallet.")

        for binding, state in sampled:
            try:
                if state is LifecycleState.FINISHED:
                    self._finish(binding, report)
                elif state is LifecycleState.ACTIVATABLE:
                    self._activate(binding, report)
                else:
                    binding.lifecycle_state = state
            except Exception as exc:
                failure = OperationFailure.from_exception(
                    f"advance:{state.value}", binding.name, exc
                )
                failure.log(logger)
                report.failures.append(failure)

        return report

    def _scan(self, report: TickReport) -> list[tuple[NameBinding, LifecycleState]]:
        sampled: list[tuple[NameBinding, LifecycleState]] = []
        for binding in self._ledger.bindings():
            try:
                sampled.append((binding, binding.sample_state()))
            except Exception as exc:
                failure = OperationFailure.from_exception("scan", binding.name, exc)
                failure.log(logger)
                report.failures.append(failure)
        return sampled

    def _finish(self, binding: NameBinding, report: TickReport) -> None:
        logger.info("Registration finished for %r", binding.name)
        binding.lifecycle_state = LifecycleState.FINISHED
        self._store.mark_active(binding.name)

        try:
            row = self._store.lookup(binding.name)
            if row is None:
                raise BindingNotFoundError(binding.name)
            if self._updater.update_name(row.identity_ref, row.credential_hash):
                logger.info("Issued attestation update successfully for %r.", binding.name)
                refreshed = self._store.lookup(binding.name)
                binding.update_txid = refreshed.update_txid if refreshed else None
                report.updated.append(binding.name)
            else:
                logger.warning("Attestation update failed for %r.", binding.name)
        finally:
            binding.lifecycle_state = LifecycleState.ACTIVE
            self._ledger.remove(binding)
            report.finished.append(binding.name)

    def _activate(self, binding: NameBinding, report: TickReport) -> None:
        logger.info("Activating %r", binding.name)
        binding.lifecycle_state = LifecycleState.ACTIVATABLE
        binding.registration.activate()
        self._store.update_payload(binding.name, binding.reg_payload)
        binding.lifecycle_state = LifecycleState.REGISTERING
        report.activated.append(binding.name)


__all__ = ["ReconciliationLoop", "TickReport"]
