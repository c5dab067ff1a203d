"""Registry name derivation.

A credential fingerprint is attested at a fixed position in the registry:
``"<namespace>/<credential_hash>"``. The mapping is a pure function, so a
relying party can recompute the name from the fingerprint alone.
"""
from __future__ import annotations

NAMESPACE: str = "ot"


def derive_name(namespace: str, credential_hash: str) -> str:
    """Return the registry name for *credential_hash* under *namespace*.

    Parameters
    ----------
    namespace:
        Registry namespace prefix (``"ot"`` for credential attestations).
    credential_hash:
        Fingerprint of the credential set.

    Returns
    -------
    str
        ``"<namespace>/<credential_hash>"``.

    Raises
    ------
    ValueError
        If either component is empty.
    """
    if not namespace:
        raise ValueError("namespace must be a non-empty string")
    if not credential_hash:
        raise ValueError("credential_hash must be a non-empty string")
    return f"{namespace}/{credential_hash}"


__all__ = ["NAMESPACE", "derive_name"]
