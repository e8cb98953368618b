from __future__ import annotations

from pathlib import Path

import pytest

from src.store.kv_store import JsonFileStore, MemoryStore, OverlayStore, read_json, write_json


def test_json_file_store_sets_reads_and_removes_keys(tmp_path: Path) -> None:
    store_dir = tmp_path / "store"
    store = JsonFileStore(store_dir)

    assert store.get("users") is None
    assert store.keys() == []

    store.set("users", "[]")
    store.set("dataInitialized", "true")

    assert store.get("users") == "[]"
    assert (store_dir / "users.json").read_text(encoding="utf-8") == "[]"
    assert store.keys() == ["dataInitialized", "users"]

    store.remove("users")
    store.remove("users")

    assert store.get("users") is None
    assert sorted(path.name for path in store_dir.iterdir()) == ["dataInitialized.json"]


def test_set_overwrites_previous_value_without_leaving_temp_files(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)

    store.set("scholarships", '[{"id": "1"}]')
    store.set("scholarships", "[]")

    assert store.get("scholarships") == "[]"
    assert [path.name for path in tmp_path.iterdir()] == ["scholarships.json"]


def test_store_rejects_keys_that_are_not_plain_names() -> None:
    store = MemoryStore()

    with pytest.raises(ValueError):
        store.set("../users", "[]")
    with pytest.raises(ValueError):
        store.get("")


def test_read_json_returns_default_for_absent_key_and_raises_on_garbage() -> None:
    store = MemoryStore({"applications": "{not json"})

    assert read_json(store, "users", []) == []
    with pytest.raises(ValueError, match="applications"):
        read_json(store, "applications")


def test_write_json_keeps_non_ascii_text_readable() -> None:
    store = MemoryStore()

    write_json(store, "currentUser", {"email": "zoë@example.com"})

    assert "zoë" in store.get("currentUser")
    assert read_json(store, "currentUser") == {"email": "zoë@example.com"}


def test_overlay_store_keeps_current_user_per_visitor() -> None:
    shared = MemoryStore({"users": "[]", "currentUser": '{"email": "admin@demo.com"}'})
    first = OverlayStore(shared)
    second = OverlayStore(shared)

    assert first.get("currentUser") is None
    first.set("currentUser", '{"email": "a@x.com"}')
    first.set("scholarships", "[]")

    assert second.get("currentUser") is None
    assert second.get("scholarships") == "[]"
    assert shared.get("currentUser") == '{"email": "admin@demo.com"}'
    assert first.keys() == ["currentUser", "scholarships", "users"]
    assert second.keys() == ["scholarships", "users"]

    first.remove("currentUser")
    assert first.get("currentUser") is None
