"""Tests for session persistence."""

import pytest

from tesouro.state.store import JsonSessionStore, MemorySessionStore, SessionRecord, SessionStore


@pytest.fixture
def json_store(tmp_path):
    return JsonSessionStore(tmp_path / "sessions")


def _record(turn: int = 3) -> SessionRecord:
    return SessionRecord(snapshot={"biome": "praia", "turn": turn, "phase": "idle"})


class TestJsonSessionStore:
    """File-based store."""

    def test_save_and_load(self, json_store):
        record = _record()
        json_store.save(record)
        loaded = json_store.load(record.id)
        assert loaded.id == record.id
        assert loaded.snapshot == record.snapshot

    def test_partial_id(self, json_store):
        record = _record()
        json_store.save(record)
        assert json_store.load(record.id[:4]).id == record.id

    def test_missing(self, json_store):
        assert json_store.load("nope") is None
        assert not json_store.exists("nope")

    def test_backup_on_overwrite(self, json_store):
        record = _record()
        json_store.save(record)
        record.snapshot["turn"] = 4
        json_store.save(record)
        assert (json_store.sessions_dir / f"{record.id}.json.bak").exists()
        assert json_store.load(record.id).snapshot["turn"] == 4

    def test_corrupt_file(self, json_store):
        (json_store.sessions_dir / "broken.json").write_text("{not json", encoding="utf-8")
        assert json_store.load("broken") is None
        assert json_store.list_all() == []

    def test_list_and_delete(self, json_store):
        record = _record(turn=5)
        json_store.save(record)
        summaries = json_store.list_all()
        assert summaries[0]["id"] == record.id
        assert summaries[0]["biome"] == "praia"
        assert summaries[0]["turn"] == 5
        assert json_store.delete(record.id)
        assert not json_store.delete(record.id)
        assert json_store.list_all() == []

    def test_satisfies_protocol(self, json_store):
        assert isinstance(json_store, SessionStore)


class TestMemorySessionStore:
    """In-memory store used by tests and the default API."""

    def test_copies_on_save_and_load(self, memory_store):
        record = _record()
        memory_store.save(record)
        record.snapshot["turn"] = 99
        loaded = memory_store.load(record.id)
        assert loaded.snapshot["turn"] == 3
        loaded.snapshot["turn"] = 42
        assert memory_store.load(record.id).snapshot["turn"] == 3

    def test_partial_id(self, memory_store):
        record = _record()
        memory_store.save(record)
        assert memory_store.load(record.id[:3]).id == record.id

    def test_clear(self, memory_store):
        memory_store.save(_record())
        memory_store.clear()
        assert memory_store.list_all() == []

    def test_satisfies_protocol(self, memory_store):
        assert isinstance(memory_store, SessionStore)
