"""SQLite-backed binding store.

One table, ``name_bindings``, holds a row per registration. The connection
is shared across threads and serialized with a lock, so a background
scheduler and a registration caller can use the same store.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from name_attestation.errors import PersistenceError
from name_attestation.store.base import BindingRow, BindingStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS name_bindings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL,
    identity_ref    TEXT NOT NULL,
    credential_hash TEXT NOT NULL,
    active          INTEGER NOT NULL DEFAULT 0,
    reg_payload     TEXT,
    update_txid     TEXT
);

CREATE INDEX IF NOT EXISTS idx_name_bindings_name ON name_bindings(name);
"""

_COLUMNS = "id, name, identity_ref, credential_hash, active, reg_payload, update_txid"


class SqliteBindingStore(BindingStore):
    """:class:`BindingStore` persisted in an SQLite database file.

    Parameters
    ----------
    db_path:
        Database file. Parent directories are created. Pass ``":memory:"``
        for a private in-memory database.
    """

    def __init__(self, db_path: Path | str) -> None:
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db_path = str(db_path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open binding store {self._db_path!r}: {exc}") from exc
        logger.debug("Binding store opened at %s", self._db_path)

    @contextmanager
    def _db_op(self) -> Generator[sqlite3.Connection, None, None]:
        """Serialize access, commit on success and roll back on failure."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error as exc:
                try:
                    self._conn.rollback()
                except sqlite3.Error:
                    logger.warning("Rollback failed on binding store %s", self._db_path)
                raise PersistenceError(str(exc)) from exc

    # ------------------------------------------------------------------
    # BindingStore interface
    # ------------------------------------------------------------------

    def insert(self, row: BindingRow) -> BindingRow:
        with self._db_op() as conn:
            cursor = conn.execute(
                """
                INSERT INTO name_bindings
                    (name, identity_ref, credential_hash, active, reg_payload, update_txid)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    row.name,
                    row.identity_ref,
                    row.credential_hash,
                    int(row.active),
                    row.reg_payload,
                    row.update_txid,
                ),
            )
            row_id = cursor.lastrowid
        return BindingRow(
            name=row.name,
            identity_ref=row.identity_ref,
            credential_hash=row.credential_hash,
            active=row.active,
            reg_payload=row.reg_payload,
            update_txid=row.update_txid,
            row_id=row_id,
        )

    def rows(self) -> list[BindingRow]:
        with self._db_op() as conn:
            cursor = conn.execute(f"SELECT {_COLUMNS} FROM name_bindings ORDER BY id")
            return [self._row_to_binding(r) for r in cursor.fetchall()]

    def pending_rows(self) -> list[BindingRow]:
        with self._db_op() as conn:
            cursor = conn.execute(
                f"SELECT {_COLUMNS} FROM name_bindings"
                " WHERE reg_payload IS NOT NULL AND NOT active ORDER BY id"
            )
            return [self._row_to_binding(r) for r in cursor.fetchall()]

    def lookup(self, name: str) -> BindingRow | None:
        with self._db_op() as conn:
            cursor = conn.execute(
                f"SELECT {_COLUMNS} FROM name_bindings WHERE name = ? ORDER BY id LIMIT 1",
                (name,),
            )
            record = cursor.fetchone()
        return self._row_to_binding(record) if record is not None else None

    def update_payload(self, name: str, payload: str) -> None:
        with self._db_op() as conn:
            conn.execute(
                "UPDATE name_bindings SET reg_payload = ? WHERE name = ?",
                (payload, name),
            )

    def mark_active(self, name: str) -> None:
        with self._db_op() as conn:
            conn.execute(
                "UPDATE name_bindings SET reg_payload = NULL, active = 1 WHERE name = ?",
                (name,),
            )

    def set_update_tx(self, name: str, txid: str) -> None:
        with self._db_op() as conn:
            conn.execute(
                "UPDATE name_bindings SET update_txid = ? WHERE name = ?",
                (txid, name),
            )

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_binding(record: sqlite3.Row) -> BindingRow:
        return BindingRow(
            name=record["name"],
            identity_ref=record["identity_ref"],
            credential_hash=record["credential_hash"],
            active=bool(record["active"]),
            reg_payload=record["reg_payload"],
            update_txid=record["update_txid"],
            row_id=record["id"],
        )


__all__ = ["SCHEMA", "SqliteBindingStore"]
