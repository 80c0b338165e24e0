from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from ..errors import PackageInstallError, PrereqError, ProvisionError
from ..state import StepState
from .command import fmt_argv
from .net import run_remote_installer
from .retry import retry

if TYPE_CHECKING:
    from ..context import RunContext

logger = logging.getLogger(__name__)

LOCK_WAIT_MAX_S = 300
LOCK_POLL_S = 5

HOMEBREW_INSTALLER_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

_LOCK_FILES: Dict[str, List[str]] = {
    "apt": ["/var/lib/dpkg/lock", "/var/lib/dpkg/lock-frontend", "/var/lib/apt/lists/lock"],
    "dnf": ["/var/run/dnf.pid", "/var/run/yum.pid"],
    "yum": ["/var/run/yum.pid"],
}


def privileged(ctx: "RunContext", argv: Sequence[str]) -> List[str]:
    """Prefix argv with sudo when not root and sudo is available."""

    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return list(argv)
    if ctx.which("sudo"):
        return ["sudo", *argv]
    return list(argv)


def install_argv(family: str, package: str) -> List[str]:
    if family == "apt":
        return ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "-qq", package]
    if family == "dnf":
        return ["dnf", "install", "-y", "-q", package]
    if family == "yum":
        return ["yum", "install", "-y", "-q", package]
    if family == "pacman":
        return ["pacman", "-S", "--noconfirm", package]
    if family == "brew":
        return ["brew", "install", package]
    raise PrereqError(f"Unsupported package manager family: {family}")


def _family(ctx: "RunContext") -> str:
    family = ctx.os_info.package_family
    if family is None:
        raise PrereqError(f"Unsupported OS: {ctx.os_info.id} (no known package manager)")
    return family


def wait_for_package_manager(ctx: "RunContext") -> bool:
    """Wait until no process holds the package manager's lock files."""

    lock_files = _LOCK_FILES.get(ctx.os_info.package_family or "", [])
    if not lock_files or ctx.dry_run or not ctx.which("fuser"):
        return True

    waited = 0
    while waited < LOCK_WAIT_MAX_S:
        locked = False
        for lock_file in lock_files:
            r = ctx.runner(privileged(ctx, ["fuser", lock_file]), check=False)
            if r.ok:
                locked = True
                break
        if not locked:
            return True

        if waited == 0:
            logger.info("Package manager is locked; waiting")
        ctx.sleep(LOCK_POLL_S)
        waited += LOCK_POLL_S
        if waited % 30 == 0:
            logger.info("Still waiting for package manager (%ss)", waited)

    logger.warning("Package manager lock timeout after %ss", LOCK_WAIT_MAX_S)
    return False


def update_package_cache(ctx: "RunContext") -> None:
    """Refresh package metadata once per run, best-effort."""

    if ctx.package_cache_refreshed:
        return
    ctx.package_cache_refreshed = True

    family = ctx.os_info.package_family
    if family is None or not wait_for_package_manager(ctx):
        return

    if family == "apt":
        argv = privileged(ctx, ["apt-get", "update", "-qq"])
    elif family in {"dnf", "yum"}:
        # check-update exits 100 when updates are available
        argv = privileged(ctx, [family, "check-update"])
    elif family == "pacman":
        argv = privileged(ctx, ["pacman", "-Sy"])
    elif family == "brew" and ctx.which("brew"):
        argv = ["brew", "update"]
    else:
        return

    def _attempt() -> None:
        r = ctx.runner(argv, check=False, dry_run=ctx.dry_run)
        if r.returncode not in (0, 100):
            raise PackageInstallError(f"{fmt_argv(argv)} exited {r.returncode}")

    try:
        retry(_attempt, policy=ctx.retry_policy, what="package cache update", sleep=ctx.sleep)
    except PackageInstallError as e:
        logger.warning("Failed to update package cache (continuing anyway): %s", e)
        ctx.warnings.append("package cache update failed")


def ensure_homebrew(ctx: "RunContext") -> None:
    if ctx.which("brew"):
        return
    logger.info("Homebrew not found; installing")
    run_remote_installer(
        ctx,
        HOMEBREW_INSTALLER_URL,
        interpreter=["/bin/bash"],
        env={"NONINTERACTIVE": "1"},
        name="homebrew",
    )
    ctx.ledger.record("homebrew")


def ensure_package(ctx: "RunContext", name: str, *, command: Optional[str] = None) -> bool:
    """Install a package unless its command already resolves on PATH.

    Returns True when something was installed, False when already present.
    """

    if ctx.which(command or name):
        logger.info("%s is already available", name)
        return False

    family = _family(ctx)
    if family == "brew":
        ensure_homebrew(ctx)

    update_package_cache(ctx)
    if not wait_for_package_manager(ctx):
        raise PackageInstallError(f"Package manager lock timeout while installing {name}")

    argv = install_argv(family, name)
    if family != "brew":
        argv = privileged(ctx, argv)

    def _attempt() -> None:
        ctx.mark(StepState.INSTALLING)
        r = ctx.runner(argv, check=False, dry_run=ctx.dry_run)
        if not r.ok:
            raise PackageInstallError(f"Failed to install {name} ({fmt_argv(argv)} exited {r.returncode})")

    retry(_attempt, policy=ctx.retry_policy, what=f"install {name}", sleep=ctx.sleep, on_retry=ctx.retrying)

    if not ctx.dry_run and not ctx.which(command or name):
        raise ProvisionError(f"{name} validation failed: not on PATH after install")

    ctx.ledger.record(f"package:{name}")
    return True


def font_cache_refresh(ctx: "RunContext", font_dir: Path) -> None:
    if not ctx.which("fc-cache"):
        return
    r = ctx.runner(["fc-cache", "-f", str(font_dir)], check=False, dry_run=ctx.dry_run)
    if not r.ok:
        logger.warning("Failed to refresh font cache")
