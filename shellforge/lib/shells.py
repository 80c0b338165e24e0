from __future__ import annotations

import logging
import os
import pwd
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from ..errors import ShellChangeWarning
from ..state import StepState

if TYPE_CHECKING:
    from ..context import RunContext

logger = logging.getLogger(__name__)

SHELLS_FILE = Path("/etc/shells")


def current_login_shell() -> Optional[str]:
    """Login shell from the passwd database, falling back to $SHELL."""
    try:
        return pwd.getpwuid(os.getuid()).pw_shell or os.environ.get("SHELL")
    except KeyError:
        return os.environ.get("SHELL")


def registered_shells(shells_file: Path = SHELLS_FILE) -> List[str]:
    try:
        lines = shells_file.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    return [ln.strip() for ln in lines if ln.strip() and not ln.lstrip().startswith("#")]


def _can_sudo(ctx: "RunContext") -> bool:
    if not ctx.which("sudo"):
        return False
    return ctx.runner(["sudo", "-n", "true"], check=False).ok


def register_shell(ctx: "RunContext", shell_path: str, shells_file: Path = SHELLS_FILE) -> None:
    """Append shell_path to the allowed-shells registry."""

    if ctx.dry_run:
        logger.info("Would add %s to %s", shell_path, shells_file)
        return

    if os.access(shells_file, os.W_OK):
        with open(shells_file, "a", encoding="utf-8") as fh:
            fh.write(shell_path + "\n")
        return

    r = ctx.runner(["sudo", "tee", "-a", str(shells_file)], check=False, input_text=shell_path + "\n")
    if not r.ok:
        raise ShellChangeWarning(f"Failed to add {shell_path} to {shells_file}")


def set_default_shell(ctx: "RunContext", shell_path: str) -> bool:
    """Make shell_path the login shell. Returns True when it changed.

    Every failure is a ShellChangeWarning; the caller reports it and moves on.
    """

    shells_file = ctx.shells_file
    if ctx.login_shell() == shell_path:
        logger.info("%s is already the default shell", shell_path)
        return False

    ctx.mark(StepState.INSTALLING)
    if shell_path not in registered_shells(shells_file):
        if not os.access(shells_file, os.W_OK) and not _can_sudo(ctx):
            raise ShellChangeWarning(
                f"Cannot modify {shells_file} without sudo privileges; "
                f"set it manually with: chsh -s {shell_path}"
            )
        try:
            register_shell(ctx, shell_path, shells_file)
        except ShellChangeWarning as e:
            # chsh may still accept it; report and carry on
            logger.warning("%s", e)
            ctx.warnings.append(str(e))

    r = ctx.runner(["chsh", "-s", shell_path], check=False, dry_run=ctx.dry_run)
    if not r.ok:
        raise ShellChangeWarning(
            f"Failed to change default shell automatically; run manually: chsh -s {shell_path}"
        )
    return True
