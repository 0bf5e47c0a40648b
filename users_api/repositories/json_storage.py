"""
JSON-file persistence for the user collection.

The whole collection lives in a single JSON array that is read and
rewritten wholesale. ``JsonUserStore`` keeps the last collection it read
or wrote in memory so that read-only requests do not hit the disk.

There is no locking: two writers that start from the same fresh snapshot
race, and whichever calls ``persist`` last wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from users_api.domain.users import User

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for failures of the backing file."""


class StorageIOError(StorageError):
    """Raised when the file exists but cannot be read, or cannot be written."""


class StorageFormatError(StorageError):
    """Raised when the stored content is not a JSON array of user records."""


class JsonUserStore:
    """Owns the backing file of the user collection and its in-memory copy."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._cache: Optional[list[User]] = None

    @property
    def cache_present(self) -> bool:
        return self._cache is not None

    def invalidate(self) -> None:
        self._cache = None

    # -------------------------------------- reads --------------------------------------
    def load_fresh(self) -> list[User]:
        """Re-read the backing file, replace the cache and return the records."""
        users = self._read()
        self._cache = users
        return list(users)

    def load_cached(self) -> list[User]:
        if self._cache is None:
            return self.load_fresh()
        return list(self._cache)

    def _read(self) -> list[User]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Users file %s does not exist yet, starting empty", self.path)
            return []
        except OSError as exc:
            raise StorageIOError(f"Cannot read {self.path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageFormatError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StorageFormatError(f"{self.path} must hold a JSON array, got {type(data).__name__}")
        try:
            users = [User.from_dict(item) for item in data]
        except ValueError as exc:
            raise StorageFormatError(f"{self.path} holds an invalid record: {exc}") from exc
        logger.debug("Loaded %d users from %s", len(users), self.path)
        return users

    # -------------------------------------- writes --------------------------------------
    def persist(self, records: Iterable[User]) -> None:
        """Overwrite the backing file with ``records``; the cache follows only on success."""
        users = list(records)
        payload = json.dumps([user.to_dict() for user in users], ensure_ascii=False, indent=2)
        tmp_path: Optional[Path] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f"{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageIOError(f"Cannot write {self.path}: {exc}") from exc
        self._cache = users
        logger.debug("Wrote %d users to %s", len(users), self.path)
