"""
Persistent key/value storage.

Save subsystems write whole documents under string keys. Two backends:
- FileStorage: one JSON file per key inside a save directory
- MemoryStorage: in-process dict (tests, headless tools)

Errors from the underlying medium propagate as OSError; callers in the
save layer catch and report them.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Iterator, Protocol


_SAFE_KEY = re.compile(r'^[A-Za-z0-9_.-]+$')


class Storage(Protocol):
    """Minimal key/value storage contract."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStorage:
    """Dictionary-backed storage."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


class FileStorage:
    """
    Directory-backed storage.

    Each key maps to <save_path>/<key>.json. Writes go to a temporary
    file in the same directory and are swapped in with os.replace, so a
    crash mid-write never leaves a truncated save behind.
    """

    SUFFIX = ".json"

    def __init__(self, save_path: str | Path):
        self.save_path = Path(save_path)
        self.save_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.save_path / f"{key}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.save_path, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    def keys(self) -> Iterator[str]:
        for path in sorted(self.save_path.glob(f"*{self.SUFFIX}")):
            yield path.name[:-len(self.SUFFIX)]
