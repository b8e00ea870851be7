"""
SQLite State Repository

Architectural Intent:
- Persistent record of what was last applied, using SQLite (stdlib)
- Stores the identity suffix per deployment and its applied target set
- Implements DeploymentStateRepository for the provisioning use cases

Design Decisions:
- Single database file at configurable path (default: ccfleet.db);
  ":memory:" is accepted for tests and dry runs
- Auto-creates tables on first use
- Registration order is preserved through an explicit position column
- Replacing a registration set happens inside one SQL transaction
"""

from __future__ import annotations
import sqlite3
import logging
from datetime import datetime, UTC
from typing import Optional, Sequence

from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.value_objects.target_registration import TargetRegistration

logger = logging.getLogger(__name__)


class SQLiteStateRepository(DeploymentStateRepository):
    """Applied-state storage using SQLite."""

    def __init__(self, db_path: str = "ccfleet.db"):
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Open database connection and create tables."""
        self._conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
        )
        if self._db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.row_factory = sqlite3.Row
        self._create_tables()
        logger.info("SQLite state repository connected: %s", self._db_path)

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def _create_tables(self) -> None:
        """Create tables if they don't exist."""
        assert self._conn is not None
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS deployments (
                name_prefix TEXT PRIMARY KEY,
                suffix TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS registrations (
                name_prefix TEXT NOT NULL,
                position INTEGER NOT NULL,
                target_group_id TEXT NOT NULL,
                address TEXT NOT NULL,
                slot_index INTEGER NOT NULL,
                applied_at TEXT NOT NULL,
                PRIMARY KEY (name_prefix, position)
            );

            CREATE INDEX IF NOT EXISTS idx_registrations_prefix
                ON registrations(name_prefix);
        """)

    # -- Identity ------------------------------------------------------------

    def load_suffix(self, name_prefix: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT suffix FROM deployments WHERE name_prefix = ?", (name_prefix,)
        ).fetchone()
        return row["suffix"] if row else None

    def save_suffix(self, name_prefix: str, suffix: str) -> None:
        existing = self.load_suffix(name_prefix)
        if existing and existing != suffix:
            raise ValueError(
                f"Deployment {name_prefix} already has suffix {existing}; "
                "suffixes are immutable"
            )
        self.conn.execute(
            """INSERT OR IGNORE INTO deployments (name_prefix, suffix, created_at)
               VALUES (?, ?, ?)""",
            (name_prefix, suffix, datetime.now(UTC).isoformat()),
        )
        self.conn.commit()

    # -- Registrations -------------------------------------------------------

    def load_registrations(self, name_prefix: str) -> list[TargetRegistration]:
        rows = self.conn.execute(
            """SELECT target_group_id, address, slot_index FROM registrations
               WHERE name_prefix = ? ORDER BY position""",
            (name_prefix,),
        ).fetchall()
        return [
            TargetRegistration(r["target_group_id"], r["address"], r["slot_index"])
            for r in rows
        ]

    def save_registrations(
        self, name_prefix: str, registrations: Sequence[TargetRegistration]
    ) -> None:
        applied_at = datetime.now(UTC).isoformat()
        with self.conn:
            self.conn.execute(
                "DELETE FROM registrations WHERE name_prefix = ?", (name_prefix,)
            )
            self.conn.executemany(
                """INSERT INTO registrations
                   (name_prefix, position, target_group_id, address, slot_index, applied_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                [
                    (name_prefix, i, r.target_group_id, r.address, r.slot_index, applied_at)
                    for i, r in enumerate(registrations)
                ],
            )

    def forget(self, name_prefix: str) -> None:
        with self.conn:
            self.conn.execute(
                "DELETE FROM registrations WHERE name_prefix = ?", (name_prefix,)
            )
            self.conn.execute(
                "DELETE FROM deployments WHERE name_prefix = ?", (name_prefix,)
            )
        logger.info("Forgot applied state for %s", name_prefix)
