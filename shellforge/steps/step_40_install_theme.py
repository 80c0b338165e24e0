from __future__ import annotations

import logging

from .. import console
from ..context import RunContext
from ..lib.git import clone_or_update
from ..pipeline import StepState

logger = logging.getLogger(__name__)


class InstallThemeStep:
    step_id = "40_install_theme"
    title = "Installing Powerlevel10k Theme"
    required = True

    def run(self, ctx: RunContext) -> StepState:
        theme = ctx.profile.theme
        name = ctx.profile.theme_name
        ctx.environment.theme = str(theme.get("setting") or f"{name}/{name}")

        if not clone_or_update(ctx, str(theme["repo"]), ctx.theme_dir, depth=1):
            console.success(f"{name} is already installed")
            ctx.ledger.record_existing(f"theme:{name}")
            return StepState.SKIPPED

        console.success(f"{name} installed successfully")
        ctx.ledger.record(f"theme:{name}")
        return StepState.SUCCEEDED
