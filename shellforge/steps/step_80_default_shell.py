from __future__ import annotations

import logging

from .. import console
from ..context import RunContext
from ..errors import ShellChangeWarning
from ..lib.shells import set_default_shell
from ..pipeline import StepState

logger = logging.getLogger(__name__)


class SetDefaultShellStep:
    step_id = "80_default_shell"
    title = "Setting ZSH as Default Shell"
    required = False

    def run(self, ctx: RunContext) -> StepState:
        shell = ctx.profile.shell
        shell_path = ctx.environment.shell_path or ctx.which(shell)
        if not shell_path:
            raise ShellChangeWarning(f"{shell} not found in PATH")

        if not set_default_shell(ctx, shell_path):
            console.success(f"{shell} is already the default shell")
            ctx.ledger.record_existing(f"shell:{shell}")
            return StepState.SKIPPED

        ctx.environment.default_shell_changed = True
        console.success(f"Default shell changed to {shell}")
        console.warning("Please log out and log back in for the change to take effect")
        ctx.ledger.record(f"shell:{shell}")
        return StepState.SUCCEEDED
