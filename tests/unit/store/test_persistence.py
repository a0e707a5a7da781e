"""Tests for draft snapshot serialization and draft stores."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from offerwizard.exceptions import PersistenceError
from offerwizard.store import DraftSnapshot, FileDraftStore, MemoryDraftStore


class TestDraftSnapshot:
    def test_to_dict_shape(self, fixed_now: datetime) -> None:
        snapshot = DraftSnapshot(
            form_data={"identification": {"COD_OFFERTA": "X1"}},
            last_saved_at=fixed_now,
        )
        assert snapshot.to_dict() == {
            "formData": {"identification": {"COD_OFFERTA": "X1"}},
            "lastSavedAt": "2024-05-01T10:00:00+00:00",
        }

    def test_never_saved(self) -> None:
        assert DraftSnapshot().to_dict() == {"formData": {}, "lastSavedAt": None}

    def test_from_dict_parses_timestamp(self, fixed_now: datetime) -> None:
        snapshot = DraftSnapshot.from_dict(
            {"formData": {"a": {}}, "lastSavedAt": "2024-05-01T10:00:00+00:00"}
        )
        assert snapshot.last_saved_at == fixed_now
        assert snapshot.form_data == {"a": {}}

    def test_from_dict_rejects_non_object_form_data(self) -> None:
        with pytest.raises(ValueError):
            DraftSnapshot.from_dict({"formData": [1, 2]})


class TestFileDraftStore:
    async def test_save_and_load(self, tmp_path: Path, fixed_now: datetime) -> None:
        store = FileDraftStore(tmp_path / "nested" / "draft.json")
        snapshot = DraftSnapshot(
            form_data={"offerDetails": {"NOME_OFFERTA": "Luce più"}},
            last_saved_at=fixed_now,
        )
        await store.save(snapshot)

        on_disk = json.loads(store.path.read_text(encoding="utf-8"))
        assert set(on_disk) == {"formData", "lastSavedAt"}

        loaded = await store.load()
        assert loaded == snapshot

    async def test_load_missing_returns_none(self, tmp_path: Path) -> None:
        assert await FileDraftStore(tmp_path / "none.json").load() is None

    async def test_malformed_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "draft.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError) as exc_info:
            await FileDraftStore(path).load()
        assert exc_info.value.path == path

    async def test_non_object_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "draft.json"
        path.write_text("[]")
        with pytest.raises(PersistenceError):
            await FileDraftStore(path).load()

    async def test_unserializable_data_raises(self, tmp_path: Path) -> None:
        store = FileDraftStore(tmp_path / "draft.json")
        with pytest.raises(PersistenceError):
            await store.save(DraftSnapshot(form_data={"a": {1, 2}}))
        assert not store.path.exists()

    async def test_clear(self, tmp_path: Path) -> None:
        store = FileDraftStore(tmp_path / "draft.json")
        await store.save(DraftSnapshot())
        await store.clear()
        await store.clear()
        assert await store.load() is None


class TestMemoryDraftStore:
    async def test_round_trip_is_isolated(self) -> None:
        store = MemoryDraftStore()
        data = {"a": {"x": 1}}
        await store.save(DraftSnapshot(form_data=data))
        data["a"]["x"] = 2

        loaded = await store.load()
        assert loaded is not None
        assert loaded.form_data == {"a": {"x": 1}}
        assert store.saves == 1

    async def test_configured_failure(self) -> None:
        store = MemoryDraftStore(fail_with="disk full")
        with pytest.raises(PersistenceError, match="disk full"):
            await store.save(DraftSnapshot())
