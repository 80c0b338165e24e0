from __future__ import annotations

import logging

from .. import console
from ..context import RunContext
from ..errors import ProvisionError
from ..lib.assets import move_aside
from ..lib.git import is_repo
from ..lib.net import run_remote_installer
from ..pipeline import StepState

logger = logging.getLogger(__name__)


class InstallFrameworkStep:
    step_id = "30_install_framework"
    title = "Installing Oh My Zsh"
    required = True

    def run(self, ctx: RunContext) -> StepState:
        fw = ctx.profile.framework
        name = ctx.profile.framework_name
        fw_dir = ctx.framework_dir
        ctx.environment.framework_dir = str(fw_dir)

        if is_repo(fw_dir):
            console.success(f"{name} is already installed")
            ctx.ledger.record_existing(f"framework:{name}")
            return StepState.SKIPPED

        if fw_dir.exists():
            console.warning(f"{name} directory exists but appears corrupted")
            backup = move_aside(fw_dir, dry_run=ctx.dry_run)
            console.info(f"Moved corrupted installation to {backup}")

        env = {str(k): str(v) for k, v in (fw.get("installer_env") or {}).items()}
        env["ZSH"] = str(fw_dir)
        run_remote_installer(
            ctx,
            str(fw["installer_url"]),
            interpreter=["sh"],
            env=env,
            name=name,
        )

        if not ctx.dry_run and not is_repo(fw_dir):
            raise ProvisionError(f"{name} validation failed: {fw_dir}/.git missing")

        console.success(f"{name} installed successfully")
        ctx.ledger.record(f"framework:{name}")
        return StepState.SUCCEEDED
