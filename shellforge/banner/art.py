from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .cache import ART_INDEX_KEY, CacheStore

logger = logging.getLogger(__name__)

MARKER = "===ART"


def parse_blocks(text: str) -> List[str]:
    """Split an art catalog into blocks.

    Block k is everything between the k-th marker line and the next one
    (or the end of the file). Text before the first marker is ignored.
    """

    blocks: List[List[str]] = []
    for line in text.splitlines():
        if line.startswith(MARKER):
            blocks.append([])
        elif blocks:
            blocks[-1].append(line)

    out: List[str] = []
    for lines in blocks:
        while lines and not lines[-1].strip():
            lines.pop()
        out.append("\n".join(lines))
    return out


def load_blocks(catalog: Path) -> List[str]:
    try:
        return parse_blocks(catalog.read_text(encoding="utf-8"))
    except OSError as e:
        logger.debug("Art catalog unavailable (%s): %s", catalog, e)
        return []


def read_index(cache: CacheStore) -> int:
    entry = cache.get(ART_INDEX_KEY)
    if entry is None:
        return 1
    try:
        index = int(entry.value)
    except ValueError:
        return 1
    return index if index >= 1 else 1


def next_art_block(catalog: Path, cache: CacheStore) -> str:
    """Return the current block and advance the persisted round-robin index."""

    blocks = load_blocks(catalog)
    if not blocks:
        return ""

    n = len(blocks)
    current = (read_index(cache) - 1) % n + 1
    cache.set(ART_INDEX_KEY, str(current % n + 1))
    return blocks[current - 1]
