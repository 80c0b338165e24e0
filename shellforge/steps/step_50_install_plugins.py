from __future__ import annotations

import logging

from .. import console
from ..context import RunContext
from ..errors import ProvisionError
from ..lib.git import clone_or_update
from ..pipeline import StepState

logger = logging.getLogger(__name__)


class InstallPluginsStep:
    step_id = "50_install_plugins"
    title = "Installing ZSH Plugins"
    required = True

    def run(self, ctx: RunContext) -> StepState:
        available: list[str] = []
        cloned = 0
        failed = 0

        for plugin in ctx.profile.plugins:
            try:
                if clone_or_update(ctx, plugin.repo, ctx.plugin_dir(plugin.name), depth=1):
                    console.success(f"{plugin.name} installed")
                    ctx.ledger.record(f"plugin:{plugin.name}")
                    cloned += 1
                else:
                    console.success(f"{plugin.name} already installed")
                    ctx.ledger.record_existing(f"plugin:{plugin.name}")
                available.append(plugin.name)
            except (ProvisionError, OSError) as e:
                console.error(f"Failed to install {plugin.name}: {e}")
                failed += 1

        ctx.environment.plugins = [*ctx.profile.builtin_plugins, *available]

        if failed:
            if not available:
                raise ProvisionError("No plugins were installed successfully")
            console.warning(f"{failed} plugin(s) failed to install")
            ctx.warnings.append(f"{failed} plugin(s) failed to install")

        return StepState.SUCCEEDED if cloned else StepState.SKIPPED
