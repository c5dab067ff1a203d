"""Wallet unlock gating for operations that need spend authority.

If the wallet is locked, the coordinator asks a :class:`SecretPrompt` for the
passphrase and keeps asking until the passphrase is right or the user
cancels. A wallet that needs no passphrase is reported as unlocked without
prompting.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from name_attestation.errors import RegistryError, WrongPassphraseError
from name_attestation.registry.client import RegistryClient

logger = logging.getLogger(__name__)

UNLOCK_MESSAGE = (
    "Your wallet is locked. For the operations to proceed, please enter the"
    " passphrase to temporarily unlock the wallet."
)


class UnlockOutcome(str, Enum):
    """Result of one unlock attempt or of a whole :meth:`UnlockCoordinator.unlock` call.

    ``WRONG_SECRET`` only ever describes a single attempt; ``unlock()``
    loops past it.
    """

    UNLOCKED = "unlocked"
    WRONG_SECRET = "wrong_secret"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SecretPrompt(ABC):
    """Interactive collaborator that asks the user for a secret."""

    @abstractmethod
    def ask(self, message: str) -> str | None:
        """Show *message* and return the entered secret, or ``None`` on cancel."""


class UnlockCoordinator:
    """Unlocks a registry wallet, prompting only when needed.

    Parameters
    ----------
    client:
        Registry client whose wallet is unlocked.
    prompt:
        Secret prompt used when a passphrase is required.
    """

    def __init__(self, client: RegistryClient, prompt: SecretPrompt) -> None:
        self._client = client
        self._prompt = prompt

    def unlock(self) -> UnlockOutcome:
        """Make sure the wallet is unlocked.

        Returns
        -------
        UnlockOutcome
            ``UNLOCKED`` on success (or if no passphrase is needed),
            ``CANCELLED`` if the user dismissed the prompt, ``FAILED`` if the
            registry reported an error. Callers abort on anything but
            ``UNLOCKED``.
        """
        logger.debug("Trying to unlock the wallet.")
        try:
            if not self._client.need_wallet_passphrase():
                logger.debug("Unlock not necessary.")
                return UnlockOutcome.UNLOCKED

            while True:
                secret = self._prompt.ask(UNLOCK_MESSAGE)
                if secret is None:
                    logger.info("Wallet unlock was cancelled.")
                    return UnlockOutcome.CANCELLED

                outcome = self._attempt(secret)
                if outcome is UnlockOutcome.UNLOCKED:
                    logger.info("Wallet unlocked.")
                    return outcome
                logger.info("Wrong passphrase, retrying.")
        except RegistryError as exc:
            logger.error("Wallet unlock failed: %s", exc)
            return UnlockOutcome.FAILED
        except Exception:
            logger.exception("Unexpected error while unlocking the wallet")
            return UnlockOutcome.FAILED

    def _attempt(self, secret: str) -> UnlockOutcome:
        try:
            self._client.unlock_wallet(secret)
        except WrongPassphraseError:
            return UnlockOutcome.WRONG_SECRET
        return UnlockOutcome.UNLOCKED


__all__ = ["SecretPrompt", "UNLOCK_MESSAGE", "UnlockCoordinator", "UnlockOutcome"]
