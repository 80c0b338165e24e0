from __future__ import annotations

import logging
import random
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .cache import QUOTE_KEY, CacheStore

logger = logging.getLogger(__name__)

FALLBACK_QUOTE = (
    "You have power over your mind - not outside events. "
    "Realize this, and you will find strength."
)

# "<text> - Author Name": up to four capitalized words after the last dash
_AUTHOR_RE = re.compile(r"^(?P<text>.+?)\s+-\s+(?P<author>[A-Z][\w'.]*(?:\s+[A-Z][\w'.]*){0,3})\s*$")


def load_quotes(path: Path) -> List[str]:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    return [ln.strip() for ln in lines if ln.strip()]


def today_quote(
    quotes_file: Path,
    cache: CacheStore,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Quote of the day: cached until the calendar day changes."""

    now = now or datetime.now()
    entry = cache.get(QUOTE_KEY)
    if entry is not None and entry.value and entry.written_at.date() == now.date():
        return entry.value

    quotes = load_quotes(quotes_file)
    if not quotes:
        logger.debug("No quotes available in %s; using fallback", quotes_file)
        return FALLBACK_QUOTE

    quote = (rng or random).choice(quotes)
    cache.set(QUOTE_KEY, quote)
    return quote


def split_author(quote: str) -> Tuple[str, Optional[str]]:
    m = _AUTHOR_RE.match(quote.strip())
    if not m:
        return quote.strip(), None
    return m.group("text"), m.group("author")
