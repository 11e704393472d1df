from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Protocol


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredTokens:
    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.access_token and not self.refresh_token


class TokenStorage(Protocol):
    def read(self) -> StoredTokens:
        ...

    def write(self, tokens: StoredTokens) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryTokenStorage:
    """Volatile copy; gone when the process exits."""

    def __init__(self):
        self._tokens = StoredTokens()

    def read(self) -> StoredTokens:
        return self._tokens

    def write(self, tokens: StoredTokens) -> None:
        self._tokens = tokens

    def clear(self) -> None:
        self._tokens = StoredTokens()


class FileTokenStorage:
    """Durable JSON copy that survives process restarts."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = Lock()

    def read(self) -> StoredTokens:
        with self._lock:
            try:
                raw = self._path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return StoredTokens()
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("token_storage: unreadable_file path=%s", self._path)
            return StoredTokens()
        if not isinstance(payload, dict):
            return StoredTokens()
        return StoredTokens(
            access_token=payload.get("access_token") or None,
            refresh_token=payload.get("refresh_token") or None,
        )

    def write(self, tokens: StoredTokens) -> None:
        payload = {"access_token": tokens.access_token, "refresh_token": tokens.refresh_token}
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload), encoding="utf-8")
            os.replace(tmp_path, self._path)

    def clear(self) -> None:
        with self._lock:
            try:
                self._path.unlink()
            except FileNotFoundError:
                pass


class TokenStorageSet:
    """Writes and clears every storage together; reads from the first one holding tokens."""

    def __init__(self, storages: list[TokenStorage]):
        if not storages:
            raise ValueError("At least one token storage is required.")
        self._storages = tuple(storages)

    def read(self) -> StoredTokens:
        for storage in self._storages:
            tokens = storage.read()
            if not tokens.is_empty:
                return tokens
        return StoredTokens()

    def write(self, tokens: StoredTokens) -> None:
        for storage in self._storages:
            storage.write(tokens)

    def update_access_token(self, access_token: str) -> None:
        current = self.read()
        self.write(StoredTokens(access_token=access_token, refresh_token=current.refresh_token))

    def clear(self) -> None:
        for storage in self._storages:
            storage.clear()
