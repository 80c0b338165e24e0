from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

ART_INDEX_KEY = "art_index"
QUOTE_KEY = "daily_quote"
IP_KEY = "ip_address"


@dataclass(frozen=True)
class CacheEntry:
    value: str
    written_at: datetime


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[CacheEntry]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def expire(self, key: str) -> None:
        ...


def default_cache_dir(environ: Mapping[str, str] = os.environ) -> Path:
    base = environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / "shellforge"


class FileCacheStore:
    """One small file per key; the file's mtime is the write time.

    Writes are whole-file overwrites without locking. Two sessions starting
    at once may both read the same value, which only repeats an art block.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / key

    def get(self, key: str) -> Optional[CacheEntry]:
        p = self._path(key)
        try:
            value = p.read_text(encoding="utf-8").strip()
            written_at = datetime.fromtimestamp(p.stat().st_mtime)
        except OSError:
            return None
        return CacheEntry(value=value, written_at=written_at)

    def set(self, key: str, value: str) -> None:
        p = self._path(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(value + "\n", encoding="utf-8")
        except OSError as e:
            logger.debug("Cache write failed for %s: %s", p, e)

    def expire(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Cache expire failed for %s: %s", key, e)
