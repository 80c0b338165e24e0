from __future__ import annotations

import logging
import os
import shutil
from typing import TYPE_CHECKING, Callable, List

from .. import console
from ..errors import PermissionWarning, PrereqError
from .net import is_online

if TYPE_CHECKING:
    from ..context import RunContext

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def check_privileges(ctx: "RunContext") -> None:
    if is_root():
        raise PermissionWarning("Running as root is not recommended")
    if not os.access(ctx.home, os.W_OK):
        raise PermissionWarning(f"Home directory {ctx.home} is not writable")


def missing_tools(ctx: "RunContext") -> List[str]:
    return [t for t in ctx.profile.required_tools if not ctx.which(t)]


def check_required_tools(ctx: "RunContext") -> None:
    missing = missing_tools(ctx)
    if missing:
        raise PrereqError(f"Missing required commands: {' '.join(missing)}")


def check_os(ctx: "RunContext") -> None:
    info = ctx.os_info
    console.success(f"Detected OS: {info.id} {info.version}")
    if info.is_wsl:
        console.info("Running in WSL")
    if not info.supported:
        console.warning(f"OS '{info.id}' may not be fully supported. Proceeding with caution...")
        ctx.warnings.append(f"unsupported OS {info.id}")


def check_internet(ctx: "RunContext") -> None:
    console.info("Checking internet connectivity...")
    if not is_online(ctx, ctx.profile.connectivity_endpoints):
        raise PrereqError("No internet connection detected; check your network and try again")
    console.success("Internet connection verified")


def check_disk_space(ctx: "RunContext") -> None:
    console.info("Checking available disk space...")
    available_kb = shutil.disk_usage(ctx.home).free // 1024
    required_kb = ctx.profile.min_disk_kb
    if available_kb < required_kb:
        raise PrereqError(
            f"Insufficient disk space. Required: {required_kb}KB, Available: {available_kb}KB"
        )
    console.success(f"Sufficient disk space available ({available_kb}KB)")


def run_preflight(ctx: "RunContext", *, auto_confirm: bool, confirm: Callable[[str], bool]) -> None:
    """Run all pre-flight checks; PrereqError aborts the install."""

    console.header("Pre-flight Checks")

    try:
        check_privileges(ctx)
    except PermissionWarning as e:
        console.warning(str(e))
        ctx.warnings.append(str(e))
        if not auto_confirm and not confirm("Continue anyway? (y/n) "):
            raise PrereqError("Cancelled after privilege warning") from e

    check_required_tools(ctx)
    console.success("Prerequisites check completed")
    check_os(ctx)
    check_internet(ctx)
    check_disk_space(ctx)
    console.success("All pre-flight checks passed")
