"""Colored, symbol-prefixed user messages.

Every message is also written to the run log so the full story can be
recovered from the log file after the fact.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable

from colorama import Fore, Style

logger = logging.getLogger("shellforge")

RULE = "━" * 60


def header(title: str) -> None:
    print(f"{Fore.CYAN}{RULE}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{title}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{RULE}{Style.RESET_ALL}")
    logger.info("HEADER: %s", title)


def success(message: str) -> None:
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} {message}")
    logger.info("SUCCESS: %s", message)


def error(message: str) -> None:
    print(f"{Fore.RED}✗{Style.RESET_ALL} {message}", file=sys.stderr)
    logger.error("%s", message)


def warning(message: str) -> None:
    print(f"{Fore.YELLOW}⚠{Style.RESET_ALL} {message}")
    logger.warning("%s", message)


def info(message: str) -> None:
    print(f"{Fore.BLUE}ℹ{Style.RESET_ALL} {message}")
    logger.info("%s", message)


def check(ok: bool, message: str) -> None:
    """Status line without logging; used by the read-only status report."""
    symbol = f"{Fore.GREEN}✓" if ok else f"{Fore.RED}✗"
    print(f"{symbol}{Style.RESET_ALL} {message}")


def bullet_list(items: Iterable[str], *, symbol: str = "-") -> None:
    for item in items:
        print(f"  {symbol} {item}")
