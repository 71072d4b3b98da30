"""SQLite collaborator for Cursebound persistence.

Every entity kind shares one ``entities`` table keyed by (kind, id) with
the pydantic JSON payload stored as text. Transient ``OperationalError``s
(a locked database, mostly) are retried with exponential backoff; once the
attempts are exhausted the failure surfaces as a CollaboratorError.

Changes are delivered to subscribers of the same store instance after a
successful commit.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Generator, TypeVar

from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cursebound.core.exceptions import CollaboratorError
from cursebound.core.logging import get_logger
from cursebound.storage.base import (
    ChangeBroadcaster,
    ChangeEvent,
    ChangeHandler,
    ChangeType,
    EntityKind,
    Filter,
    Subscription,
    deserialize,
    matches,
    serialize,
)


logger = get_logger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "SQLite operation failed, retrying",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


class SQLiteStore:
    """Collaborator backed by a single SQLite file.

    Attributes:
        db_path: Location of the database file.
        retry_attempts: Attempts per operation before giving up.
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str | Path,
        *,
        retry_attempts: int = 3,
        retry_wait_max: float = 2.0,
    ) -> None:
        """Open (and if needed create) the database.

        Args:
            db_path: Path to the database file.
            retry_attempts: Attempts per operation for transient errors.
            retry_wait_max: Upper bound in seconds on the backoff between attempts.
        """
        self.db_path = Path(db_path)
        self.retry_attempts = retry_attempts
        self.retry_wait_max = retry_wait_max
        self._broadcaster = ChangeBroadcaster()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._run("init", None, self._init_schema)
        logger.info("Database initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection that commits on success."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _run(self, operation: str, kind: EntityKind | None, func: Callable[[], T]) -> T:
        """Run ``func`` with retries, translating failures to CollaboratorError."""
        retrying = Retrying(
            retry=retry_if_exception_type(sqlite3.OperationalError),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=self.retry_wait_max),
            before_sleep=_log_retry,
        )
        entity_kind = kind.value if kind else None
        try:
            return retrying(func)
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            raise CollaboratorError(
                f"SQLite {operation} failed after {self.retry_attempts} attempts: {cause}",
                entity_kind=entity_kind,
                operation=operation,
            ) from cause
        except sqlite3.Error as exc:
            raise CollaboratorError(
                f"SQLite {operation} failed: {exc}",
                entity_kind=entity_kind,
                operation=operation,
            ) from exc

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entities (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    kind TEXT NOT NULL,
                    id TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (kind, id)
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_entities_kind
                ON entities(kind)
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Collaborator Operations
    # =========================================================================

    def persist(self, kind: EntityKind, entity: BaseModel) -> None:
        """Upsert ``entity`` and notify subscribers.

        Raises:
            CollaboratorError: If the write fails after retries.
        """
        kind = EntityKind(kind)
        payload = serialize(entity)
        entity_id = str(payload["id"])
        now = datetime.now(UTC).isoformat()

        def write() -> bool:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT 1 FROM entities WHERE kind = ? AND id = ?",
                    (kind.value, entity_id),
                )
                existed = cursor.fetchone() is not None
                cursor.execute("""
                    INSERT INTO entities (kind, id, payload, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT (kind, id)
                    DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
                """, (kind.value, entity_id, json.dumps(payload), now))
                return existed

        existed = self._run("persist", kind, write)
        change = ChangeType.UPDATE if existed else ChangeType.INSERT
        logger.debug("Entity persisted", kind=kind.value, id=entity_id, change=change.value)
        self._broadcaster.publish(
            ChangeEvent(kind=kind, change=change, entity_id=entity_id, payload=payload)
        )

    def fetch(self, kind: EntityKind, filter: Filter | None = None) -> list[BaseModel]:
        """Return stored entities of ``kind`` matching ``filter``, oldest first.

        Raises:
            CollaboratorError: If the read fails after retries.
        """
        kind = EntityKind(kind)

        def read() -> list[dict[str, Any]]:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT payload FROM entities WHERE kind = ? ORDER BY seq",
                    (kind.value,),
                )
                return [json.loads(row["payload"]) for row in cursor.fetchall()]

        payloads = self._run("fetch", kind, read)
        return [deserialize(kind, p) for p in payloads if matches(p, filter)]

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        """Remove an entity; returns False if it was not stored."""
        kind = EntityKind(kind)
        entity_id = str(entity_id)

        def remove() -> dict[str, Any] | None:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT payload FROM entities WHERE kind = ? AND id = ?",
                    (kind.value, entity_id),
                )
                row = cursor.fetchone()
                if row is None:
                    return None
                cursor.execute(
                    "DELETE FROM entities WHERE kind = ? AND id = ?",
                    (kind.value, entity_id),
                )
                return json.loads(row["payload"])

        payload = self._run("delete", kind, remove)
        if payload is None:
            return False
        logger.info("Entity deleted", kind=kind.value, id=entity_id)
        self._broadcaster.publish(
            ChangeEvent(kind=kind, change=ChangeType.DELETE, entity_id=entity_id, payload=payload)
        )
        return True

    def subscribe(
        self,
        kind: EntityKind,
        filter: Filter | None,
        on_insert: ChangeHandler | None = None,
        on_update: ChangeHandler | None = None,
        on_delete: ChangeHandler | None = None,
    ) -> Subscription:
        """Deliver future changes to ``kind`` matching ``filter``."""
        return self._broadcaster.subscribe(kind, filter, on_insert, on_update, on_delete)

    def count(self, kind: EntityKind) -> int:
        """Number of stored entities of ``kind``."""
        kind = EntityKind(kind)

        def read() -> int:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM entities WHERE kind = ?", (kind.value,))
                return cursor.fetchone()[0]

        return self._run("count", kind, read)


__all__ = ["SQLiteStore"]
