"""Tests for the SQLite collaborator."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from uuid import uuid4

import pytest

from cursebound.core.config import Settings, StorageSettings
from cursebound.core.exceptions import CollaboratorError
from cursebound.models.character import Character
from cursebound.models.dice import DiceRoll
from cursebound.models.enums import DieType, VowEffectKind
from cursebound.models.session import GameSession
from cursebound.models.vows import BindingVow, VowEffect
from cursebound.storage.base import ChangeEvent, ChangeType, EntityKind
from cursebound.storage.database import SQLiteStore
from cursebound.storage.factory import create_store
from cursebound.storage.memory import InMemoryStore


@pytest.fixture
def db(temp_db_path: Path) -> SQLiteStore:
    """A SQLite store in a temporary directory, with no backoff delay."""
    return SQLiteStore(temp_db_path, retry_wait_max=0)


class TestSchema:
    """Tests for database initialization."""

    def test_creates_file_and_directory(self, db: SQLiteStore, temp_db_path: Path) -> None:
        """Test the database file is created with its parent directory."""
        assert temp_db_path.exists()

    def test_reopen_keeps_data(self, db: SQLiteStore, temp_db_path: Path) -> None:
        """Test data survives reopening the file."""
        session = GameSession(name="Kyoto Goodwill Event")
        db.persist(EntityKind.SESSION, session)

        reopened = SQLiteStore(temp_db_path)

        assert reopened.fetch(EntityKind.SESSION) == [session]


class TestRoundTrip:
    """Tests for persisting and fetching each entity kind."""

    def test_session(self, db: SQLiteStore) -> None:
        """Test sessions round-trip, without their roll history."""
        session = GameSession(name="Shibuya", master_id=uuid4())

        db.persist(EntityKind.SESSION, session)

        assert db.fetch(EntityKind.SESSION, {"id": session.id}) == [session]

    def test_character(self, db: SQLiteStore, sample_character: Character) -> None:
        """Test characters round-trip with pools and attributes."""
        db.persist(EntityKind.CHARACTER, sample_character)

        assert db.fetch(EntityKind.CHARACTER) == [sample_character]

    def test_dice_roll(self, db: SQLiteStore) -> None:
        """Test rolls round-trip including their timestamp."""
        roll = DiceRoll(
            session_id=uuid4(),
            actor_id=uuid4(),
            actor_name="Nobara",
            die_type=DieType.D20,
            raw_result=20,
            modifier=5,
            total=25,
            difficulty_class=20,
            success=True,
            critical_bonus=True,
        )

        db.persist(EntityKind.DICE_ROLL, roll)

        assert db.fetch(EntityKind.DICE_ROLL, {"session_id": roll.session_id}) == [roll]

    def test_binding_vow(self, db: SQLiteStore, sample_character: Character) -> None:
        """Test vows round-trip with benefit and penalty."""
        vow = BindingVow(
            character_id=sample_character.id,
            name="Hairpin",
            benefit=VowEffect(kind=VowEffectKind.DAMAGE_MULTIPLIER, value=1.25),
            penalty=VowEffect(kind=VowEffectKind.COST_REDUCTION, value=-0.5, target="pe"),
        )

        db.persist(EntityKind.BINDING_VOW, vow)

        assert db.fetch(EntityKind.BINDING_VOW) == [vow]

    def test_upsert_keeps_order(self, db: SQLiteStore) -> None:
        """Test updates overwrite in place and fetch keeps insertion order."""
        first = GameSession(name="First")
        second = GameSession(name="Second")
        db.persist(EntityKind.SESSION, first)
        db.persist(EntityKind.SESSION, second)
        db.persist(EntityKind.SESSION, first.model_copy(update={"name": "First, renamed"}))

        names = [s.name for s in db.fetch(EntityKind.SESSION)]

        assert names == ["First, renamed", "Second"]
        assert db.count(EntityKind.SESSION) == 2

    def test_delete(self, db: SQLiteStore) -> None:
        """Test deleted entities are gone."""
        session = GameSession()
        db.persist(EntityKind.SESSION, session)

        assert db.delete(EntityKind.SESSION, str(session.id)) is True
        assert db.delete(EntityKind.SESSION, str(session.id)) is False
        assert db.fetch(EntityKind.SESSION) == []


class TestSubscriptions:
    """Tests for change delivery from the SQLite store."""

    def test_insert_then_update(self, db: SQLiteStore) -> None:
        """Test committed writes are delivered as insert then update."""
        events: list[ChangeEvent] = []
        session = GameSession()
        db.subscribe(EntityKind.SESSION, {"id": session.id}, events.append, events.append)

        db.persist(EntityKind.SESSION, session)
        db.persist(EntityKind.SESSION, session.model_copy(update={"name": "Renamed"}))

        assert [e.change for e in events] == [ChangeType.INSERT, ChangeType.UPDATE]


class TestRetry:
    """Tests for retrying transient SQLite errors."""

    def test_gives_up_after_attempts(
        self,
        db: SQLiteStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a persistently locked database raises CollaboratorError after 3 tries."""
        calls: list[str] = []

        def locked(*args, **kwargs):
            calls.append("connect")
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(sqlite3, "connect", locked)

        with pytest.raises(CollaboratorError) as exc_info:
            db.persist(EntityKind.SESSION, GameSession())

        assert len(calls) == 3
        assert exc_info.value.details["operation"] == "persist"
        assert exc_info.value.details["entity_kind"] == "game_session"

    def test_recovers_from_transient_lock(
        self,
        db: SQLiteStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a single locked attempt is retried successfully."""
        real_connect = sqlite3.connect
        failures = iter([True])

        def flaky(*args, **kwargs):
            if next(failures, False):
                raise sqlite3.OperationalError("database is locked")
            return real_connect(*args, **kwargs)

        monkeypatch.setattr(sqlite3, "connect", flaky)
        session = GameSession()

        db.persist(EntityKind.SESSION, session)

        assert db.fetch(EntityKind.SESSION) == [session]

    def test_integrity_errors_not_retried(
        self,
        db: SQLiteStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test non-transient errors fail immediately."""
        calls: list[str] = []

        def broken(*args, **kwargs):
            calls.append("connect")
            raise sqlite3.DatabaseError("file is not a database")

        monkeypatch.setattr(sqlite3, "connect", broken)

        with pytest.raises(CollaboratorError):
            db.fetch(EntityKind.CHARACTER)

        assert len(calls) == 1


class TestFactory:
    """Tests for create_store."""

    def test_memory_backend(self) -> None:
        """Test the default backend is in-memory."""
        settings = Settings(_env_file=None)

        assert isinstance(create_store(settings), InMemoryStore)

    def test_sqlite_backend(self, temp_db_path: Path) -> None:
        """Test the SQLite backend uses the configured path."""
        settings = Settings(
            _env_file=None,
            storage=StorageSettings(backend="sqlite", database_path=temp_db_path),
        )

        store = create_store(settings)

        assert isinstance(store, SQLiteStore)
        assert store.db_path == temp_db_path
