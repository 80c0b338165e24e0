from __future__ import annotations

import logging

from .. import console
from ..context import RunContext
from ..lib.pkg import ensure_package
from ..pipeline import StepState

logger = logging.getLogger(__name__)


def shell_version(ctx: RunContext, shell: str) -> str:
    r = ctx.runner([shell, "--version"], check=False)
    return r.stdout.strip() if r.ok and r.stdout.strip() else "unknown"


class InstallShellStep:
    step_id = "10_install_shell"
    title = "Installing ZSH"
    required = True

    def run(self, ctx: RunContext) -> StepState:
        shell = ctx.profile.shell

        existing = ctx.which(shell)
        if existing:
            console.success(f"{shell} is already installed: {shell_version(ctx, shell)}")
            ctx.ledger.record_existing(f"package:{shell}")
            ctx.environment.shell_path = existing
            return StepState.SKIPPED

        ensure_package(ctx, shell)
        ctx.environment.shell_path = ctx.which(shell)
        console.success(f"{shell} installed successfully: {shell_version(ctx, shell)}")
        return StepState.SUCCEEDED
