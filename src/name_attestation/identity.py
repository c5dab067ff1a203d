"""Identity source resolution.

Each identity declares a *source*: the registry address that speaks for it.
The update operation sends the attested name to that address and signs the
credential fingerprint with its key. :class:`IdentitySourceDirectory` is the
lookup contract; :class:`StaticSourceDirectory` is a dict-backed
implementation that can be saved to a JSON file.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path


class IdentitySourceDirectory(ABC):
    """Resolves identity references to their declared source address."""

    @abstractmethod
    def source_for(self, identity_ref: str) -> str:
        """Return the source address of *identity_ref*, or ``""`` if unknown."""


class StaticSourceDirectory(IdentitySourceDirectory):
    """Dict-backed :class:`IdentitySourceDirectory`.

    Example
    -------
    ::

        directory = StaticSourceDirectory({"N1": "N3kq..."})
        directory.source_for("N1")
    """

    def __init__(self, sources: dict[str, str] | None = None) -> None:
        self._sources: dict[str, str] = dict(sources or {})

    def source_for(self, identity_ref: str) -> str:
        return self._sources.get(identity_ref, "")

    def set_source(self, identity_ref: str, address: str) -> None:
        """Declare *address* as the source of *identity_ref*."""
        self._sources[identity_ref] = address

    def to_dict(self) -> dict[str, str]:
        return dict(self._sources)

    def save(self, path: Path) -> None:
        """Write the directory to *path* as a JSON object."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self._sources, indent=2, sort_keys=True), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "StaticSourceDirectory":
        """Load a directory from *path*, or return an empty one if it is missing."""
        if not path.exists():
            return cls()
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls({str(k): str(v) for k, v in data.items()})

    def __len__(self) -> int:
        return len(self._sources)


__all__ = ["IdentitySourceDirectory", "StaticSourceDirectory"]
