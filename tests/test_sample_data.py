from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

from src.auth.session import Session
from src.models.entities import parse_timestamp
from src.repository.collections import ApplicationRepository, ScholarshipRepository, UserRepository
from src.seed.sample_data import (
    DEMO_PASSWORD,
    DEMO_UNIVERSITY_ID,
    initialize_sample_data,
    is_initialized,
    reset_store,
)
from src.store.kv_store import MemoryStore

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def test_seeding_writes_demo_collections_and_flag() -> None:
    store = MemoryStore()

    assert initialize_sample_data(store, now=NOW) is True

    users = UserRepository(store).list_all()
    scholarships = ScholarshipRepository(store).list_all()
    assert [user.email for user in users] == ["admin@demo.com", "student@demo.com", "school@demo.com"]
    assert all(user.is_approved for user in users)
    assert [item.id for item in scholarships] == ["1", "2", "3", "4", "5", "6"]
    assert all(item.university_id == DEMO_UNIVERSITY_ID for item in scholarships)
    assert ApplicationRepository(store).list_all() == []
    assert store.get("dataInitialized") == "true"
    assert is_initialized(store)


def test_demo_deadlines_are_relative_to_seed_time() -> None:
    store = MemoryStore()
    initialize_sample_data(store, now=NOW)

    by_id = {item.id: item for item in ScholarshipRepository(store).list_all()}

    assert parse_timestamp(by_id["1"].deadline) == NOW + timedelta(days=30)
    assert parse_timestamp(by_id["4"].deadline) == NOW + timedelta(days=21)
    assert by_id["4"].amount == 7500.0


def test_seeding_twice_keeps_existing_data() -> None:
    store = MemoryStore()
    initialize_sample_data(store, now=NOW)
    scholarships = ScholarshipRepository(store)
    scholarships.delete("6")
    before = store.get("scholarships")

    assert initialize_sample_data(store) is False
    assert store.get("scholarships") == before
    assert len(json.loads(before)) == 5


def test_demo_student_can_sign_in() -> None:
    store = MemoryStore()
    initialize_sample_data(store, now=NOW)
    session = Session(store)

    assert session.login("student@demo.com", DEMO_PASSWORD)
    assert session.user.profile.display_name == "John Doe"
    assert session.user.profile.gpa == 3.8


def test_reset_store_removes_every_application_key() -> None:
    store = MemoryStore({"unrelated": "keep"})
    initialize_sample_data(store, now=NOW)
    session = Session(store)
    session.login("admin@demo.com", DEMO_PASSWORD)

    reset_store(store)

    assert store.keys() == ["unrelated"]
    assert not is_initialized(store)
