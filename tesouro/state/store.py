"""
Session storage abstraction.

The engine never persists anything itself; outer surfaces (API,
headless runner) save and load plain snapshots through a SessionStore.
Snapshots are stored as-is: there is no versioning or migration.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field, ValidationError

from .schema import generate_id

logger = logging.getLogger(__name__)


class SessionRecord(BaseModel):
    """A stored snapshot plus bookkeeping."""
    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    snapshot: dict = Field(default_factory=dict)

    @property
    def summary(self) -> dict:
        """Listing metadata pulled from the snapshot."""
        return {
            "id": self.id,
            "biome": self.snapshot.get("biome"),
            "turn": self.snapshot.get("turn", 0),
            "phase": self.snapshot.get("phase"),
            "updated_at": self.updated_at,
        }


@runtime_checkable
class SessionStore(Protocol):
    """
    Storage interface for game sessions.

    Implementations:
    - JsonSessionStore: File-based persistence (production)
    - MemorySessionStore: In-memory storage (testing)
    """

    def save(self, record: SessionRecord) -> None:
        """Persist a session."""
        ...

    def load(self, session_id: str) -> SessionRecord | None:
        """Load a session by ID. Returns None if not found."""
        ...

    def delete(self, session_id: str) -> bool:
        """Delete a session. Returns True if deleted."""
        ...

    def list_all(self) -> list[dict]:
        """List all sessions with metadata, newest first."""
        ...

    def exists(self, session_id: str) -> bool:
        """Check if a session exists."""
        ...


class JsonSessionStore:
    """
    File-based session storage, one JSON file per session.

    Features:
    - Automatic backup on save
    - Partial ID matching on load
    """

    def __init__(self, sessions_dir: Path | str = "sessions"):
        self.sessions_dir = Path(sessions_dir)
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def save(self, record: SessionRecord) -> None:
        """Save session to JSON file with backup."""
        record.updated_at = datetime.now()
        session_file = self._path(record.id)

        # Backup previous save
        if session_file.exists():
            backup = session_file.with_suffix(".json.bak")
            backup.write_text(session_file.read_text(encoding="utf-8"), encoding="utf-8")

        session_file.write_text(record.model_dump_json(indent=2), encoding="utf-8")

    def load(self, session_id: str) -> SessionRecord | None:
        """
        Load session by ID or partial match.

        Supports:
        - Full ID: "a1b2c3d4"
        - Partial prefix: "a1b2"
        """
        session_file = self._path(session_id)

        if not session_file.exists():
            for f in self.sessions_dir.glob("*.json"):
                if f.stem.startswith(session_id):
                    session_file = f
                    break

        if not session_file.exists():
            return None

        try:
            data = json.loads(session_file.read_text(encoding="utf-8"))
            return SessionRecord.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Corrupted session file {session_file.name}: {e}")
            return None

    def delete(self, session_id: str) -> bool:
        session_file = self._path(session_id)

        if session_file.exists():
            session_file.unlink()
            return True

        return False

    def list_all(self) -> list[dict]:
        """List all sessions sorted by modification time."""
        sessions = []

        for f in sorted(
            self.sessions_dir.glob("*.json"),
            key=lambda x: x.stat().st_mtime,
            reverse=True,
        ):
            try:
                record = SessionRecord.model_validate(json.loads(f.read_text(encoding="utf-8")))
            except (json.JSONDecodeError, ValidationError):
                continue
            sessions.append(record.summary)

        return sessions

    def exists(self, session_id: str) -> bool:
        return self._path(session_id).exists()


class MemorySessionStore:
    """
    In-memory session storage for testing.

    No file I/O - all data lives in memory.
    """

    def __init__(self):
        self.sessions: dict[str, SessionRecord] = {}

    def save(self, record: SessionRecord) -> None:
        record.updated_at = datetime.now()
        self.sessions[record.id] = record.model_copy(deep=True)

    def load(self, session_id: str) -> SessionRecord | None:
        if session_id in self.sessions:
            return self.sessions[session_id].model_copy(deep=True)

        # Partial match
        for sid, record in self.sessions.items():
            if sid.startswith(session_id):
                return record.model_copy(deep=True)

        return None

    def delete(self, session_id: str) -> bool:
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def list_all(self) -> list[dict]:
        sessions = [record.summary for record in self.sessions.values()]
        sessions.sort(key=lambda x: x["updated_at"], reverse=True)
        return sessions

    def exists(self, session_id: str) -> bool:
        return session_id in self.sessions

    def clear(self) -> None:
        """Clear all sessions (test utility)."""
        self.sessions.clear()
