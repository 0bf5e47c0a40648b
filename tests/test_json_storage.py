"""
Behaviour of the JSON-file user store: missing file, round trips, cache
coherence, corrupt content and the last-writer-wins hazard.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Make the users_api package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from users_api.domain.users import User  # noqa: E402
from users_api.repositories import json_storage  # noqa: E402
from users_api.repositories.json_storage import (  # noqa: E402
    JsonUserStore,
    StorageFormatError,
    StorageIOError,
)

ANA = User(id=1700000000000, name="Ana", email="ana@x.com", age=30)
BRUNO = User(id=1700000000001, name="Bruno", email="bruno@x.com", age=41)


@pytest.fixture()
def store(tmp_path):
    return JsonUserStore(tmp_path / "users.json")


def test_missing_file_reads_as_empty_without_creating_it(store):
    assert store.load_fresh() == []
    assert store.cache_present
    assert not store.path.exists()


def test_persist_then_load_fresh_round_trips(store):
    store.persist([BRUNO, ANA])
    store.invalidate()

    assert store.load_fresh() == [BRUNO, ANA]


def test_persisted_file_is_a_readable_json_array(store):
    store.persist([ANA])

    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == [{"id": ANA.id, "name": "Ana", "email": "ana@x.com", "age": 30}]


def test_load_cached_after_persist_does_not_touch_disk(store):
    store.persist([ANA])
    store.path.write_text("not json at all", encoding="utf-8")

    assert store.load_cached() == [ANA]
    with pytest.raises(StorageFormatError):
        store.load_fresh()


def test_load_cached_populates_cache_on_first_use(store):
    store.path.write_text(json.dumps([ANA.to_dict()]), encoding="utf-8")
    assert not store.cache_present

    assert store.load_cached() == [ANA]
    assert store.cache_present

    store.path.unlink()
    assert store.load_cached() == [ANA]


def test_load_fresh_replaces_cache(store):
    store.persist([ANA])
    store.path.write_text(json.dumps([BRUNO.to_dict()]), encoding="utf-8")

    assert store.load_fresh() == [BRUNO]
    assert store.load_cached() == [BRUNO]


def test_mutating_returned_list_leaves_cache_alone(store):
    store.persist([ANA])
    users = store.load_cached()
    users.append(BRUNO)

    assert store.load_cached() == [ANA]


@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        json.dumps({"users": []}),
        json.dumps([{"id": 1, "name": "Ana", "email": "ana@x.com"}]),
        json.dumps([{"id": 1, "name": "Ana", "email": "ana@x.com", "age": True}]),
        json.dumps(["ana@x.com"]),
    ],
)
def test_corrupt_content_raises_format_error(store, content):
    store.path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageFormatError):
        store.load_fresh()
    assert not store.cache_present


def test_unreadable_path_raises_io_error(tmp_path):
    directory = tmp_path / "users.json"
    directory.mkdir()
    store = JsonUserStore(directory)

    with pytest.raises(StorageIOError):
        store.load_fresh()


def test_failed_write_keeps_previous_cache(store, monkeypatch):
    store.persist([ANA])

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(json_storage.os, "replace", _boom)
    with pytest.raises(StorageIOError):
        store.persist([ANA, BRUNO])

    assert store.load_cached() == [ANA]


def test_persist_creates_parent_directory(tmp_path):
    store = JsonUserStore(tmp_path / "data" / "users.json")
    store.persist([ANA])

    assert store.path.exists()


def test_concurrent_mutations_keep_only_last_write(store):
    store.persist([ANA])
    first_view = store.load_fresh()
    second_view = store.load_fresh()

    first_view.append(BRUNO)
    store.persist(first_view)
    second_view.append(User(id=1700000000002, name="Carla", email="carla@x.com", age=25))
    store.persist(second_view)

    store.invalidate()
    final = store.load_fresh()
    assert [user.name for user in final] == ["Ana", "Carla"]


def test_failed_write_leaves_no_temporary_file(store, monkeypatch):
    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(json_storage.os, "replace", _boom)
    with pytest.raises(StorageIOError):
        store.persist([ANA])

    assert list(store.path.parent.iterdir()) == []


def test_successful_write_leaves_only_the_users_file(store):
    store.persist([ANA])
    store.persist([ANA, BRUNO])

    assert [p.name for p in store.path.parent.iterdir()] == ["users.json"]
