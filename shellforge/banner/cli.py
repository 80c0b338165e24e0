from __future__ import annotations

import argparse
import getpass
import logging
import os
from pathlib import Path
from typing import Optional

from colorama import just_fix_windows_console

from .cache import FileCacheStore, default_cache_dir
from .render import render_banner

logger = logging.getLogger(__name__)

SESSION_MARKER = "SHELLFORGE_BANNER_SHOWN"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "zsh"


def _default_name() -> str:
    name = os.environ.get("SHELLFORGE_NAME")
    if name:
        return name
    try:
        return getpass.getuser().capitalize()
    except (KeyError, OSError):
        return "friend"


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="shellforge-banner", description="Print the session banner.")
    p.add_argument("--config-dir", default=str(DEFAULT_CONFIG_DIR), help="Directory holding quotes.txt and ascii_art.txt")
    p.add_argument("--cache-dir", default=None, help="Cache directory (default: $XDG_CACHE_HOME/shellforge)")
    p.add_argument("--name", default=None, help="Name used in the greeting")
    p.add_argument("--force", action="store_true", help=f"Render even if {SESSION_MARKER} is set")
    args = p.parse_args(argv)

    if os.environ.get(SESSION_MARKER) and not args.force:
        return 0

    try:
        just_fix_windows_console()
        cache = FileCacheStore(Path(args.cache_dir) if args.cache_dir else default_cache_dir())
        print(
            render_banner(Path(args.config_dir).expanduser(), cache, name=args.name or _default_name()),
            end="",
        )
    except Exception:
        # The banner must never break shell startup.
        logger.debug("Banner rendering failed", exc_info=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
