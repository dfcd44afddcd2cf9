"""Tests for the JSON file stores."""

import json
import os
import threading
from datetime import datetime

import pytest

from ecotrack import store
from ecotrack.achievements import unlock_badges
from ecotrack.emissions import log_activity
from ecotrack.store import JsonBadgeStore, StoreError, append_activity, load_activities

NOW = datetime(2025, 3, 12, 15, 0)


# --- Activities ---

def test_load_missing_file_is_empty(tmp_path):
    assert load_activities(str(tmp_path / "nope.json")) == []


def test_load_list(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text(json.dumps([
        {"category": "food", "type": "beef", "amount": 2, "emissions": 54.0, "date": "2025-03-12T12:00:00"},
        {"category": "transport", "type": "bus", "amount": 10, "date": {"seconds": 1741770000}},
    ]))
    acts = load_activities(str(path))
    assert len(acts) == 2
    assert acts[0].emissions == 54.0
    assert acts[1].emissions is None
    assert acts[1].date == datetime.fromtimestamp(1741770000)


def test_load_wrapped_object(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text(json.dumps({"activities": [{"category": "food", "type": "nuts", "amount": 1}]}))
    assert len(load_activities(str(path))) == 1


def test_load_invalid_json(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text("{not json")
    with pytest.raises(StoreError, match="invalid JSON"):
        load_activities(str(path))


def test_load_invalid_utf8(tmp_path):
    path = tmp_path / "acts.json"
    path.write_bytes(b'[{"category":"food","type":"\xff","amount":1}]')
    with pytest.raises(StoreError, match="invalid JSON"):
        load_activities(str(path))


def test_load_invalid_record(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text(json.dumps([{"category": "food", "type": "beef", "amount": -3}]))
    with pytest.raises(StoreError, match="record 0"):
        load_activities(str(path))


def test_load_wrong_shape(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text(json.dumps("activities"))
    with pytest.raises(StoreError):
        load_activities(str(path))


def test_append_creates_file(tmp_path):
    path = str(tmp_path / "sub" / "acts.json")
    append_activity(path, log_activity("food", "beef", 2, NOW))
    acts = load_activities(path)
    assert len(acts) == 1
    assert acts[0].emissions == 54.0
    assert acts[0].date == NOW


def test_append_keeps_wrapper(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text(json.dumps({"owner": "alice", "activities": []}))
    append_activity(str(path), log_activity("transport", "walking", 3, NOW))
    data = json.loads(path.read_text())
    assert data["owner"] == "alice"
    assert len(data["activities"]) == 1


# --- Badges ---

def test_badge_store_missing_file(tmp_path):
    store = JsonBadgeStore(str(tmp_path / "badges.json"))
    assert store.get_unlocked("alice") == set()


def test_badge_store_union_and_sorted(tmp_path):
    path = tmp_path / "badges.json"
    store = JsonBadgeStore(str(path))
    store.add_unlocked("alice", ["low-carbon", "first-steps"])
    store.add_unlocked("alice", ["first-steps"])
    store.add_unlocked("bob", ["plant-power"])
    data = json.loads(path.read_text())
    assert data == {"alice": ["first-steps", "low-carbon"], "bob": ["plant-power"]}


def test_badge_store_unlock_cycle(tmp_path):
    store = JsonBadgeStore(str(tmp_path / "badges.json"))
    acts = [log_activity("transport", "bicycle", 5, NOW)]
    first = unlock_badges(store, "alice", acts, NOW)
    assert {b.id for b in first} == {"first-steps", "low-carbon"}
    assert unlock_badges(store, "alice", acts, NOW) == []
    assert store.get_unlocked("alice") == {"first-steps", "low-carbon"}


def test_badge_store_wrong_shape(tmp_path):
    path = tmp_path / "badges.json"
    path.write_text("[]")
    with pytest.raises(StoreError):
        JsonBadgeStore(str(path)).get_unlocked("alice")


def test_badge_store_concurrent_writers_keep_both(tmp_path, monkeypatch):
    path = tmp_path / "badges.json"
    real_load = JsonBadgeStore._load
    # Both writers pause after reading; a second writer waiting on the lock never arrives.
    after_read = threading.Barrier(2)

    def slow_load(self):
        data = real_load(self)
        try:
            after_read.wait(timeout=0.5)
        except threading.BrokenBarrierError:
            pass
        return data

    monkeypatch.setattr(JsonBadgeStore, "_load", slow_load)
    errors = []

    def writer(badge_id):
        try:
            JsonBadgeStore(str(path)).add_unlocked("alice", [badge_id])
        except Exception as exc:  # surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(b,)) for b in ("first-steps", "low-carbon")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert json.loads(path.read_text()) == {"alice": ["first-steps", "low-carbon"]}


def test_write_closes_descriptor_when_fdopen_fails(tmp_path, monkeypatch):
    opened = []
    real_mkstemp = store.tempfile.mkstemp

    def tracking_mkstemp(*args, **kwargs):
        fd, name = real_mkstemp(*args, **kwargs)
        opened.append(fd)
        return fd, name

    def failing_fdopen(*args, **kwargs):
        raise OSError("fdopen failed")

    monkeypatch.setattr(store.tempfile, "mkstemp", tracking_mkstemp)
    monkeypatch.setattr(store.os, "fdopen", failing_fdopen)
    with pytest.raises(OSError, match="fdopen failed"):
        JsonBadgeStore(str(tmp_path / "badges.json")).add_unlocked("alice", ["first-steps"])

    with pytest.raises(OSError):
        os.fstat(opened[0])
    assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".ecotrack-")] == []
