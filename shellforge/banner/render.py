from __future__ import annotations

import random
import re
import textwrap
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from colorama import Fore, Style

from .art import next_art_block
from .cache import CacheStore
from .quotes import split_author, today_quote
from .sysinfo import SystemFacts, format_uptime, gather_facts, human_size

RESET = Style.RESET_ALL
BOLD = Style.BRIGHT

C_PRIMARY = Fore.LIGHTBLUE_EX
C_ACCENT = Fore.LIGHTMAGENTA_EX
C_GREEN = Fore.LIGHTGREEN_EX
C_YELLOW = Fore.LIGHTYELLOW_EX
C_CYAN = Fore.LIGHTCYAN_EX
C_PURPLE = Fore.MAGENTA
C_RED = Fore.LIGHTRED_EX
C_ORANGE = Fore.YELLOW
C_WHITE = Fore.LIGHTWHITE_EX

ART_PALETTE = (C_CYAN, C_PURPLE, C_ACCENT, C_YELLOW, C_GREEN)

COLUMN_WIDTH = 65
QUOTE_WIDTH = 49

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

BANNER_ART = (
    r"  _   _      _ _       ",
    r" | | | | ___| | | ___  ",
    r" | |_| |/ _ \ | |/ _ \ ",
    r" |  _  |  __/ | | (_) |",
    r" |_| |_|\___|_|_|\___/ ",
)
BANNER_COLORS = (C_CYAN, C_RED, C_YELLOW, C_ORANGE, C_PRIMARY)

_BOX_INNER = 49


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))


def greeting_band(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def greeting(hour: int, name: str) -> str:
    band = greeting_band(hour)
    if band == "morning":
        return f"{C_YELLOW}{BOLD}☀️  Good Morning, {C_ORANGE}{name}{RESET}"
    if band == "afternoon":
        return f"{C_ORANGE}{BOLD}🌤️  Good Afternoon, {C_ACCENT}{name}{RESET}"
    if band == "evening":
        return f"{C_PURPLE}{BOLD}🌆 Good Evening, {C_CYAN}{name}{RESET}"
    return f"{C_CYAN}{BOLD}🌙 Good Night, {C_PURPLE}{name}{RESET}"


def usage_color(pct: int) -> str:
    if pct > 85:
        return C_ACCENT
    if pct > 70:
        return C_YELLOW
    return C_GREEN


def _row(label: str, value: str) -> str:
    return f"{C_CYAN}{BOLD}  {label}{RESET}{value}"


def render_left_column(facts: SystemFacts, quote: str, *, now: datetime, name: str) -> List[str]:
    """Banner, greeting, system panel and the wrapped quote."""

    lines = [f"{color}{BOLD}{art}{RESET}" for color, art in zip(BANNER_COLORS, BANNER_ART)]
    lines += ["", greeting(now.hour, name), ""]

    mem = f"{facts.mem_used_mb}/{facts.mem_total_mb}MB ({facts.mem_percent}%)"
    disk = f"{human_size(facts.disk_used)}/{human_size(facts.disk_total)} ({facts.disk_percent}%)"

    lines.append(f"{C_PURPLE}{BOLD}┌{'─' * _BOX_INNER}┐{RESET}")
    lines += [
        _row("💻 OS:", f"       {C_WHITE}{facts.os_name}{RESET}"),
        _row("🔧 Kernel:", f"   {C_WHITE}{facts.kernel}{RESET}"),
        _row("⏱️  Uptime:", f"   {C_GREEN}{format_uptime(facts.uptime_s)}{RESET}"),
        _row("🧠 Memory:", f"   {usage_color(facts.mem_percent)}{BOLD}{mem}{RESET}"),
        _row("💾 Disk:", f"     {usage_color(facts.disk_percent)}{BOLD}{disk}{RESET}"),
        _row("👤 User:", f"     {C_PURPLE}{facts.user}@{facts.host}{RESET}"),
        _row("🌐 IP:", f"       {C_ORANGE}{facts.ip}{RESET}"),
    ]
    lines.append(f"{C_PURPLE}{BOLD}└{'─' * _BOX_INNER}┘{RESET}")

    rule = f"{C_ACCENT}{BOLD}{'━' * (_BOX_INNER + 1)}{RESET}"
    lines += ["", rule, f"{C_YELLOW}{BOLD}💭 Thought for the day:{RESET}", ""]

    text, author = split_author(quote)
    for wrapped in textwrap.wrap(text, width=QUOTE_WIDTH) or [""]:
        lines.append(f"   {C_YELLOW}{BOLD}{wrapped}{RESET}")
    if author:
        lines.append(f"   {C_PURPLE}{BOLD}- {author}{RESET}")
    lines.append(rule)
    return lines


def render_right_column(block: str, rng: Optional[random.Random] = None) -> List[str]:
    """The art block in one color, drawn once per call."""

    if not block:
        return []
    color = (rng or random).choice(ART_PALETTE)
    return [f"{color}{line}{RESET}" for line in block.splitlines()]


def compose(left: Sequence[str], right: Sequence[str], width: int = COLUMN_WIDTH) -> str:
    """Merge two columns, padding by visible width so ANSI codes don't skew alignment."""

    out: List[str] = []
    for i in range(max(len(left), len(right))):
        left_line = left[i] if i < len(left) else ""
        right_line = right[i] if i < len(right) else ""
        padding = max(0, width - visible_len(left_line))
        out.append(f"{left_line}{' ' * padding}  {right_line}")
    return "\n".join(out) + "\n\n"


def render_banner(
    config_dir: Path,
    cache: CacheStore,
    *,
    name: str,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    facts: Optional[SystemFacts] = None,
) -> str:
    now = now or datetime.now()
    quote = today_quote(config_dir / "quotes.txt", cache, now=now, rng=rng)
    block = next_art_block(config_dir / "ascii_art.txt", cache)
    if facts is None:
        facts = gather_facts(cache, now=now)
    return compose(render_left_column(facts, quote, now=now, name=name), render_right_column(block, rng))
