from __future__ import annotations

import logging
from pathlib import Path

from .. import console
from ..context import RunContext
from ..errors import ProvisionError
from ..lib.assets import move_aside
from ..lib.net import run_remote_installer
from ..pipeline import StepState

logger = logging.getLogger(__name__)


def _installed(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0


class InstallVersionManagerStep:
    step_id = "70_install_version_manager"
    title = "Installing NVM (Node Version Manager)"
    required = False

    def run(self, ctx: RunContext) -> StepState:
        vm = ctx.profile.version_manager
        if vm is None:
            console.info("Version manager disabled in profile")
            return StepState.SKIPPED

        name = str(vm.get("name") or "nvm")
        vm_dir = ctx.expand(str(vm.get("dir") or f"~/.{name}"))
        marker = vm_dir / str(vm.get("marker") or f"{name}.sh")

        if _installed(marker):
            console.success(f"{name} is already installed")
            ctx.ledger.record_existing(name)
            return StepState.SKIPPED

        if vm_dir.exists():
            console.warning(f"{name} directory exists but appears incomplete")
            backup = move_aside(vm_dir, dry_run=ctx.dry_run)
            console.info(f"Moved incomplete installation to {backup}")

        run_remote_installer(ctx, str(vm["installer_url"]), interpreter=["bash"], name=name)

        if not ctx.dry_run and not _installed(marker):
            raise ProvisionError(f"{name} installation completed but validation failed")

        console.success(f"{name} installed successfully")
        ctx.ledger.record(name)
        return StepState.SUCCEEDED
