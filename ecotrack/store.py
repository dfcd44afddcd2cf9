"""JSON file storage — activity log and per-user unlocked badges for the CLI."""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from ecotrack.activity import Activity, InvalidArgument, parse_activities

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a data file exists but cannot be read or understood."""


def _read_json(path: str) -> Any:
    path = os.path.expanduser(path)
    if not os.path.exists(path):
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StoreError(f"{path}: invalid JSON ({exc})") from exc
    except OSError as exc:
        raise StoreError(f"{path}: {exc.strerror or exc}") from exc


def _write_json(path: str, data: Any) -> None:
    """Write via a temp file in the same directory, then rename over `path`."""
    path = os.path.abspath(os.path.expanduser(path))
    directory = os.path.dirname(path)
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=".ecotrack-", suffix=".json")
    try:
        f = os.fdopen(fd, "w", encoding="utf-8")
    except BaseException:
        os.close(fd)
        os.unlink(tmp)
        raise
    try:
        with f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


@contextmanager
def _locked(path: str) -> Iterator[None]:
    """Hold an exclusive flock on ``<path>.lock`` for the duration of the block."""
    lock_path = os.path.abspath(os.path.expanduser(path)) + ".lock"
    os.makedirs(os.path.dirname(lock_path), exist_ok=True)
    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as exc:
        raise StoreError(f"{lock_path}: {exc.strerror or exc}") from exc
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        yield
    finally:
        # closing the descriptor releases the lock
        os.close(fd)


def _records(data: Any, path: str) -> list[dict]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("activities", [])
    if not isinstance(data, list):
        raise StoreError(f"{path}: expected a list of activities")
    return data


def load_activities(path: str) -> list[Activity]:
    """Load activity records from a JSON file; a missing file is an empty log."""
    data = _read_json(path)
    try:
        activities = parse_activities(_records(data, path))
    except InvalidArgument as exc:
        raise StoreError(f"{path}: {exc}") from exc
    logger.debug("loaded %d activities from %s", len(activities), path)
    return activities


def append_activity(path: str, activity: Activity) -> None:
    """Append one record, keeping any surrounding {"activities": [...]} wrapper."""
    data = _read_json(path)
    records = _records(data, path)
    records.append(activity.to_dict())
    if isinstance(data, dict):
        data["activities"] = records
    else:
        data = records
    _write_json(path, data)
    logger.debug("appended %s/%s to %s", activity.category, activity.type, path)


class JsonBadgeStore:
    """UnlockedBadgeStore backed by ``{"<user>": ["badge-id", ...]}`` on disk."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> dict[str, list[str]]:
        data = _read_json(self.path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreError(f"{self.path}: expected an object mapping users to badge ids")
        return data

    def get_unlocked(self, user_id: str) -> set[str]:
        return set(self._load().get(user_id, []))

    def add_unlocked(self, user_id: str, badge_ids: Iterable[str]) -> None:
        """Union ``badge_ids`` into the user's set; concurrent writers serialize on a lock file."""
        with _locked(self.path):
            data = self._load()
            merged = set(data.get(user_id, [])) | set(badge_ids)
            data[user_id] = sorted(merged)
            _write_json(self.path, data)
        logger.debug("stored %d badges for %s in %s", len(merged), user_id, self.path)
