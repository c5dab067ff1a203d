"""Configuration for the name-attestation CLI and service wiring.

Settings live in ``<home>/config.json``. Every field has a default, so the
file is optional; relative file paths are resolved against the home
directory.
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from name_attestation.naming import NAMESPACE

CONFIG_FILE_NAME = "config.json"


class AttestationConfig(BaseModel):
    """Validated settings.

    Parameters
    ----------
    namespace:
        Registry namespace for attestation names.
    tick_interval_seconds:
        Interval between reconciliation ticks when running continuously.
    database_file:
        SQLite file holding binding rows.
    chain_file:
        JSON file holding the local registry state.
    identities_file:
        JSON file mapping identity references to source addresses.
    log_level:
        Root logging level.
    """

    namespace: str = Field(default=NAMESPACE, min_length=1)
    tick_interval_seconds: float = Field(default=60.0, gt=0)
    database_file: Path = Path("bindings.db")
    chain_file: Path = Path("chain.json")
    identities_file: Path = Path("identities.json")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def resolve(self, home: Path) -> "AttestationConfig":
        """Return a copy with relative file paths anchored at *home*."""
        return self.model_copy(
            update={
                "database_file": _anchor(home, self.database_file),
                "chain_file": _anchor(home, self.chain_file),
                "identities_file": _anchor(home, self.identities_file),
            }
        )


def load_config(home: Path) -> AttestationConfig:
    """Load ``<home>/config.json`` if present, else defaults, resolved against *home*.

    Raises
    ------
    pydantic.ValidationError
        If the file exists but holds invalid settings.
    """
    path = home / CONFIG_FILE_NAME
    if path.exists():
        config = AttestationConfig.model_validate_json(path.read_text(encoding="utf-8"))
    else:
        config = AttestationConfig()
    return config.resolve(home)


def _anchor(home: Path, path: Path) -> Path:
    return path if path.is_absolute() else home / path


__all__ = ["AttestationConfig", "CONFIG_FILE_NAME", "load_config"]
