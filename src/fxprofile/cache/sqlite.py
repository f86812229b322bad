"""SQLite profile store.

Persists profiles to a local SQLite database with three tables:

- ``owner``: one row per (plugin_name, plugin_format)
- ``parameter``: one row per (owner, param_index) with the classification
- ``parameter_sample``: the ordered samples of a parameter

Deleting an owner row cascades to its parameters and their samples.

Usage::

    store = SQLiteProfileStore(Path("fxprofile.db"))
    store.initialize()
    try:
        store.put(profile)
    finally:
        store.close()
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ProfileStoreError
from ..parameters import (
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterProfile,
    ParameterSample,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS owner (
    owner_id INTEGER PRIMARY KEY AUTOINCREMENT,
    plugin_name TEXT NOT NULL,
    plugin_format TEXT NOT NULL,
    UNIQUE(plugin_name, plugin_format)
);

CREATE TABLE IF NOT EXISTS parameter (
    param_id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    param_index INTEGER NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    param_type TEXT NOT NULL,
    scaling TEXT,
    confidence REAL NOT NULL,
    unit TEXT,
    enum_values TEXT,
    min_formatted TEXT NOT NULL DEFAULT '',
    max_formatted TEXT NOT NULL DEFAULT '',
    FOREIGN KEY (owner_id) REFERENCES owner(owner_id) ON DELETE CASCADE,
    UNIQUE(owner_id, param_index)
);

CREATE TABLE IF NOT EXISTS parameter_sample (
    param_id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    normalized_value REAL NOT NULL,
    formatted_value TEXT NOT NULL,
    numeric_value REAL NOT NULL,
    is_numeric INTEGER NOT NULL,
    FOREIGN KEY (param_id) REFERENCES parameter(param_id) ON DELETE CASCADE,
    UNIQUE(param_id, position)
);

CREATE INDEX IF NOT EXISTS idx_param_owner_id ON parameter(owner_id);
CREATE INDEX IF NOT EXISTS idx_sample_param_id ON parameter_sample(param_id);
"""


class SQLiteProfileStore:
    """SQLite-backed profile store.

    One connection is shared between threads and serialized by a lock;
    each write runs in its own transaction.

    Args:
        db_path: Database file, or ":memory:"
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> "SQLiteProfileStore":
        """Open the connection and create tables if needed.

        Raises:
            ProfileStoreError: If the database cannot be opened or initialized
        """
        with self._lock:
            if self._conn is not None:
                return self
            try:
                if str(self._db_path) != ":memory:":
                    Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys=ON")
                conn.executescript(SCHEMA)
            except (sqlite3.Error, OSError) as e:
                raise ProfileStoreError(f"Failed to open profile database {self._db_path}: {e}") from e
            logger.info(f"Opened profile database at {self._db_path}")
            self._conn = conn
        return self

    def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "SQLiteProfileStore":
        return self.initialize()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ProfileStoreError("Profile database is not open; call initialize() first")
        return self._conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, identity: ParameterIdentity) -> Optional[ParameterProfile]:
        with self._lock:
            conn = self._connection()
            try:
                row = conn.execute(
                    "SELECT p.* FROM parameter p JOIN owner o ON o.owner_id = p.owner_id "
                    "WHERE o.plugin_name = ? AND o.plugin_format = ? AND p.param_index = ?",
                    (identity.owner.plugin_name, identity.owner.plugin_format, identity.parameter_index),
                ).fetchone()
                if row is None:
                    return None
                return self._row_to_profile(conn, identity.owner, row)
            except sqlite3.Error as e:
                raise ProfileStoreError(f"Failed to read profile {identity}: {e}") from e

    def list_owner(self, owner: OwnerIdentity) -> List[ParameterProfile]:
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(
                    "SELECT p.* FROM parameter p JOIN owner o ON o.owner_id = p.owner_id "
                    "WHERE o.plugin_name = ? AND o.plugin_format = ? ORDER BY p.param_index",
                    (owner.plugin_name, owner.plugin_format),
                ).fetchall()
                return [self._row_to_profile(conn, owner, row) for row in rows]
            except sqlite3.Error as e:
                raise ProfileStoreError(f"Failed to list profiles for {owner}: {e}") from e

    def owners(self) -> List[OwnerIdentity]:
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(
                    "SELECT DISTINCT o.plugin_name, o.plugin_format FROM owner o "
                    "JOIN parameter p ON p.owner_id = o.owner_id "
                    "ORDER BY o.plugin_name, o.plugin_format"
                ).fetchall()
            except sqlite3.Error as e:
                raise ProfileStoreError(f"Failed to list owners: {e}") from e
        return [OwnerIdentity(row["plugin_name"], row["plugin_format"]) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, profile: ParameterProfile) -> None:
        """Replace the stored profile for the profile's identity in one transaction."""
        identity = profile.identity
        classification = profile.classification
        enum_values = json.dumps(list(profile.enum_values)) if profile.enum_values is not None else None

        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    owner_id = self._get_or_create_owner(conn, identity.owner)
                    conn.execute(
                        "DELETE FROM parameter WHERE owner_id = ? AND param_index = ?",
                        (owner_id, identity.parameter_index),
                    )
                    cursor = conn.execute(
                        "INSERT INTO parameter (owner_id, param_index, name, param_type, scaling, "
                        "confidence, unit, enum_values, min_formatted, max_formatted) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            owner_id,
                            identity.parameter_index,
                            profile.name,
                            classification.type.value,
                            classification.scaling.value if classification.scaling is not None else None,
                            classification.confidence,
                            profile.unit,
                            enum_values,
                            profile.min_formatted,
                            profile.max_formatted,
                        ),
                    )
                    param_id = cursor.lastrowid
                    conn.executemany(
                        "INSERT INTO parameter_sample (param_id, position, normalized_value, "
                        "formatted_value, numeric_value, is_numeric) VALUES (?, ?, ?, ?, ?, ?)",
                        [
                            (param_id, i, s.normalized_value, s.formatted_value, s.numeric_value, int(s.is_numeric))
                            for i, s in enumerate(profile.samples)
                        ],
                    )
            except sqlite3.Error as e:
                raise ProfileStoreError(f"Failed to store profile {identity}: {e}") from e

    def delete_owner(self, owner: OwnerIdentity) -> int:
        """Delete an owner; parameters and samples go with it via ON DELETE CASCADE."""
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    count = conn.execute(
                        "SELECT COUNT(*) FROM parameter p JOIN owner o ON o.owner_id = p.owner_id "
                        "WHERE o.plugin_name = ? AND o.plugin_format = ?",
                        (owner.plugin_name, owner.plugin_format),
                    ).fetchone()[0]
                    conn.execute(
                        "DELETE FROM owner WHERE plugin_name = ? AND plugin_format = ?",
                        (owner.plugin_name, owner.plugin_format),
                    )
            except sqlite3.Error as e:
                raise ProfileStoreError(f"Failed to delete profiles for {owner}: {e}") from e
        return int(count)

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _get_or_create_owner(conn: sqlite3.Connection, owner: OwnerIdentity) -> int:
        row = conn.execute(
            "SELECT owner_id FROM owner WHERE plugin_name = ? AND plugin_format = ?",
            (owner.plugin_name, owner.plugin_format),
        ).fetchone()
        if row is not None:
            return int(row["owner_id"])
        cursor = conn.execute(
            "INSERT INTO owner (plugin_name, plugin_format) VALUES (?, ?)",
            (owner.plugin_name, owner.plugin_format),
        )
        return int(cursor.lastrowid)

    @staticmethod
    def _row_to_profile(conn: sqlite3.Connection, owner: OwnerIdentity, row: sqlite3.Row) -> ParameterProfile:
        sample_rows = conn.execute(
            "SELECT normalized_value, formatted_value, numeric_value, is_numeric "
            "FROM parameter_sample WHERE param_id = ? ORDER BY position",
            (row["param_id"],),
        ).fetchall()
        samples = [
            ParameterSample(
                normalized_value=s["normalized_value"],
                formatted_value=s["formatted_value"],
                numeric_value=s["numeric_value"],
                is_numeric=bool(s["is_numeric"]),
            )
            for s in sample_rows
        ]
        enum_values = json.loads(row["enum_values"]) if row["enum_values"] is not None else None
        return ParameterProfile(
            identity=ParameterIdentity(owner, int(row["param_index"])),
            classification=Classification(row["param_type"], row["scaling"], float(row["confidence"])),
            samples=samples,
            enum_values=enum_values,
            unit=row["unit"],
            min_formatted=row["min_formatted"],
            max_formatted=row["max_formatted"],
            name=row["name"],
        )
