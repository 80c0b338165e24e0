from __future__ import annotations

import logging
from pathlib import Path

from .. import console
from ..context import RunContext
from ..errors import ProvisionError
from ..lib.assets import same_content, write_asset
from ..lib.manifests import assets_dir
from ..pipeline import StepState

logger = logging.getLogger(__name__)

THEME_MARKER = "__SHELLFORGE_THEME__"
PLUGINS_MARKER = "__SHELLFORGE_PLUGINS__"
ZSH_DIR_MARKER = "__SHELLFORGE_ZSH_DIR__"
NVM_DIR_MARKER = "__SHELLFORGE_NVM_DIR__"


def _shell_path(path: Path, home: Path) -> str:
    """Write paths under the target home as $HOME/... so the rc stays portable."""
    try:
        rel = path.relative_to(home)
    except ValueError:
        return str(path)
    return f"$HOME/{rel.as_posix()}" if rel.parts else "$HOME"


def render_rc(template: str, ctx: RunContext) -> str:
    """Fill the rc template from what this run actually installed."""

    env = ctx.environment
    theme = env.theme or str(ctx.profile.theme.get("setting") or ctx.profile.theme_name)
    plugins = env.plugins or ctx.profile.builtin_plugins
    zsh_dir = Path(env.framework_dir) if env.framework_dir else ctx.framework_dir
    vm = ctx.profile.version_manager or {}
    vm_dir = ctx.expand(str(vm.get("dir") or f"~/.{vm.get('name') or 'nvm'}"))
    return (
        template.replace(THEME_MARKER, theme)
        .replace(PLUGINS_MARKER, " ".join(plugins))
        .replace(ZSH_DIR_MARKER, _shell_path(zsh_dir, ctx.home))
        .replace(NVM_DIR_MARKER, _shell_path(vm_dir, ctx.home))
    )


class InstallAssetsStep:
    step_id = "60_install_assets"
    title = "Setting Up Custom Configuration"
    required = True

    def run(self, ctx: RunContext) -> StepState:
        source_dir = assets_dir()
        changed = False

        for asset in ctx.profile.assets:
            source = source_dir / asset.source
            target = ctx.expand(asset.target)

            if not source.is_file():
                if asset.required:
                    raise ProvisionError(f"{asset.source} not found in {source_dir}")
                console.warning(f"{asset.source} not found in {source_dir}; skipping")
                continue

            data = source.read_bytes()
            if asset.template:
                data = render_rc(data.decode("utf-8"), ctx).encode("utf-8")

            if same_content(target, data):
                console.success(f"{target.name} is up to date")
                ctx.ledger.record_existing(f"config:{target.name}")
                continue

            ctx.mark(StepState.INSTALLING)
            backup = write_asset(
                target,
                data,
                backup=asset.backup,
                executable=asset.executable,
                dry_run=ctx.dry_run,
            )
            if backup is not None:
                console.info(f"Existing {target.name} backed up to {backup}")
                ctx.ledger.record(f"backup:{target.name}")
            console.success(f"Installed {target}")
            ctx.ledger.record(f"config:{target.name}")
            changed = True

        return StepState.SUCCEEDED if changed else StepState.SKIPPED
