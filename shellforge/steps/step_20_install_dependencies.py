from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from urllib.parse import quote

from .. import console
from ..context import RunContext
from ..errors import DownloadError, ProvisionError
from ..lib.net import download_with_retry
from ..lib.pkg import ensure_package, font_cache_refresh
from ..pipeline import StepState

logger = logging.getLogger(__name__)

FONT_TAG = "fonts:meslo"


class InstallDependenciesStep:
    step_id = "20_install_dependencies"
    title = "Installing Dependencies"
    required = True

    def _install_fonts_macos(self, ctx: RunContext) -> bool:
        fonts = ctx.profile.fonts
        cask = str(fonts.get("brew_cask") or "font-meslo-lg-nerd-font")
        if not ctx.which("brew"):
            console.warning("Homebrew not available; skipping font installation")
            return False
        if ctx.runner(["brew", "list", "--cask", cask], check=False).ok:
            console.success("Fonts already installed")
            ctx.ledger.record_existing(FONT_TAG)
            return False

        tap = fonts.get("brew_tap")
        if tap:
            ctx.runner(["brew", "tap", str(tap)], check=False, dry_run=ctx.dry_run)
        r = ctx.runner(["brew", "install", "--cask", cask], check=False, dry_run=ctx.dry_run)
        if not r.ok:
            console.warning("Font installation failed (non-critical)")
            return False
        ctx.ledger.record(FONT_TAG)
        return True

    def _install_fonts_linux(self, ctx: RunContext) -> bool:
        fonts = ctx.profile.fonts
        files = ctx.profile.font_files
        if not files:
            return False
        font_dir = ctx.expand(str(fonts.get("dir") or "~/.local/share/fonts"))
        base_url = str(fonts.get("base_url") or "").rstrip("/")

        if (font_dir / files[0]).exists():
            console.success("Fonts already installed")
            ctx.ledger.record_existing(FONT_TAG)
            return False

        if not ctx.dry_run:
            font_dir.mkdir(parents=True, exist_ok=True)

        all_installed = True
        for file_name in files:
            tmp = Path(tempfile.gettempdir()) / file_name.replace(" ", "_")
            try:
                download_with_retry(ctx, f"{base_url}/{quote(file_name)}", tmp)
                if not ctx.dry_run:
                    shutil.move(str(tmp), str(font_dir / file_name))
                console.success(f"Installed: {file_name}")
            except (DownloadError, OSError) as e:
                console.warning(f"Failed to install font {file_name}: {e}")
                all_installed = False

        if not all_installed:
            console.warning("Some fonts failed to install (non-critical)")
            return False

        font_cache_refresh(ctx, font_dir)
        console.success("Fonts installed successfully")
        ctx.ledger.record(FONT_TAG)
        return True

    def run(self, ctx: RunContext) -> StepState:
        changed = False
        for package in ctx.profile.dependencies:
            if ensure_package(ctx, package):
                console.success(f"{package} installed successfully")
                changed = True
            else:
                console.success(f"{package} is already installed")
                ctx.ledger.record_existing(f"package:{package}")

        console.info("Installing Nerd Fonts for the prompt theme...")
        try:
            if ctx.os_info.id == "macos":
                changed = self._install_fonts_macos(ctx) or changed
            else:
                changed = self._install_fonts_linux(ctx) or changed
        except (ProvisionError, OSError) as e:
            console.warning(f"Font installation failed (non-critical): {e}")

        return StepState.SUCCEEDED if changed else StepState.SKIPPED
