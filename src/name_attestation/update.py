"""Writes the signed attestation to a registered name.

Once a name's registration is finished, one more transaction is needed:
it sends the name to the identity's source address and sets its value to
the source address's signature over the credential fingerprint.
"""
from __future__ import annotations

import json
import logging

from name_attestation.errors import NoPrivateKeyError
from name_attestation.identity import IdentitySourceDirectory
from name_attestation.naming import NAMESPACE, derive_name
from name_attestation.registry.client import RegistryClient
from name_attestation.store.base import BindingStore

logger = logging.getLogger(__name__)

SIGNATURE_FIELD: str = "nmcsig"
"""Key of the attestation signature inside a name's JSON value."""


def attestation_value(signature: str) -> str:
    """Return the name value text carrying *signature*."""
    return json.dumps({SIGNATURE_FIELD: signature}, separators=(",", ":"))


class NameUpdater:
    """Issues the attestation update for finished registrations.

    Parameters
    ----------
    client:
        Registry client; its wallet must already be unlocked by the caller.
    store:
        Binding store receiving the update transaction id.
    sources:
        Directory resolving identities to their source addresses.
    namespace:
        Registry namespace for derived names.
    """

    def __init__(
        self,
        client: RegistryClient,
        store: BindingStore,
        sources: IdentitySourceDirectory,
        namespace: str = NAMESPACE,
    ) -> None:
        self._client = client
        self._store = store
        self._sources = sources
        self._namespace = namespace

    def update_name(self, identity_ref: str, credential_hash: str) -> bool:
        """Send the name for *credential_hash* to the identity's source and sign it.

        Parameters
        ----------
        identity_ref:
            Identity whose source address receives the name.
        credential_hash:
            Fingerprint that is signed and whose name is updated.

        Returns
        -------
        bool
            True iff the update transaction was issued. False if the source
            is invalid or not owned, the wallet is still locked, or the key
            needed for signing or updating is unavailable.

        Raises
        ------
        RegistryError
            For registry failures other than a missing private key.
        """
        source = self._sources.source_for(identity_ref)
        address = self._client.address(source)

        if not address.is_valid() or not address.is_mine():
            logger.warning(
                "Identity source %r is not a valid address, or it is not owned by you.",
                source,
            )
            return False

        name = derive_name(self._namespace, credential_hash)

        # No nested unlock here: the caller unlocks once per tick.
        if self._client.need_wallet_passphrase():
            logger.warning(
                "Wallet should be unlocked already for update_name(), but is not."
            )
            return False

        try:
            signature = address.sign_message(credential_hash)
            txid = self._client.name_update(
                name, attestation_value(signature), to_address=source
            )
        except NoPrivateKeyError:
            logger.warning("Name %r cannot be updated, the private key is not available.", name)
            return False

        self._store.set_update_tx(name, txid)
        logger.info("Issued attestation update for %r in transaction %s", name, txid)
        return True


__all__ = ["NameUpdater", "SIGNATURE_FIELD", "attestation_value"]
