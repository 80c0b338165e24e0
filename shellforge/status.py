"""Read-only report of what is installed and what an install would change.

Nothing here writes to disk, runs a package manager or touches the network.
"""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import List, Optional

import yaml
from colorama import init as colorama_init

from . import console
from .banner.art import load_blocks
from .banner.quotes import load_quotes
from .context import RunContext
from .lib.git import is_repo
from .lib.manifests import assets_dir
from .lib.osinfo import detect_os
from .profile import load_profile

logger = logging.getLogger(__name__)


def _shell_version(ctx: RunContext, shell: str) -> str:
    r = ctx.runner([shell, "--version"], check=False)
    return r.stdout.strip() if r.ok else "unknown"


def report(ctx: RunContext) -> List[str]:
    """Print the status report; return the planned actions."""

    profile = ctx.profile
    shell = profile.shell
    plan: List[str] = []

    console.header("System Information")
    print(f"OS: {ctx.os_info.id}")
    print(f"OS Version: {ctx.os_info.version}")
    print(f"WSL: {str(ctx.os_info.is_wsl).lower()}")
    try:
        print(f"User: {getpass.getuser()}")
    except (KeyError, OSError):
        print("User: unknown")
    print(f"Home: {ctx.home}")
    print()

    console.header("Current Installation Status")
    shell_path = ctx.which(shell)
    if shell_path:
        console.check(True, f"{shell}: Installed ({_shell_version(ctx, shell)})")
    else:
        console.check(False, f"{shell}: Not installed")
        plan.append(f"Install {shell}")

    current_shell = ctx.login_shell() or "unknown"
    is_default = bool(shell_path) and current_shell == shell_path
    console.check(is_default, f"Default Shell: {shell if is_default else current_shell}")
    if not is_default:
        plan.append(f"Set {shell} as the default shell")

    fw_name = profile.framework_name
    fw_ok = is_repo(ctx.framework_dir)
    console.check(fw_ok, f"{fw_name}: {'Installed' if fw_ok else 'Not installed'}")
    if not fw_ok:
        plan.append(f"Install {fw_name}")

    theme_ok = is_repo(ctx.theme_dir)
    console.check(theme_ok, f"{profile.theme_name}: {'Installed' if theme_ok else 'Not installed'}")
    if not theme_ok:
        plan.append(f"Install {profile.theme_name}")

    for plugin in profile.plugins:
        ok = is_repo(ctx.plugin_dir(plugin.name))
        console.check(ok, f"{plugin.name}: {'Installed' if ok else 'Not installed'}")
        if not ok:
            plan.append(f"Install plugin {plugin.name}")
    print()

    console.header("Required Dependencies")
    for package in profile.dependencies:
        ok = bool(ctx.which(package))
        console.check(ok, f"{package}: {'Installed' if ok else 'Not installed'}")
        if not ok:
            plan.append(f"Install {package}")
    print()

    console.header("Custom Configuration Files")
    src = assets_dir()
    for asset in profile.assets:
        path = src / asset.source
        if not path.is_file():
            console.check(False, f"{asset.source}: Not found")
            continue
        detail = ""
        if asset.source.endswith("quotes.txt"):
            detail = f" ({len(load_quotes(path))} quotes)"
        elif asset.source.endswith("ascii_art.txt"):
            detail = f" ({len(load_blocks(path))} art styles)"
        console.check(True, f"{asset.source}: Found{detail}")
    print()

    console.header("Existing Configuration Files (Will be backed up)")
    for asset in profile.assets:
        target = ctx.expand(asset.target)
        if not asset.backup:
            continue
        if target.exists():
            console.warning(f"{target.name} exists - will be backed up")
            st = target.stat()
            print(f"   Location: {target}")
            print(f"   Size: {st.st_size} bytes")
        else:
            console.check(False, f"{target.name}: Does not exist (new install)")
    print()

    console.header("Font Installation")
    files = profile.font_files
    font_dir = ctx.expand(str(profile.fonts.get("dir") or "~/.local/share/fonts"))
    if ctx.os_info.id == "macos":
        font_dir = ctx.home / "Library" / "Fonts"
    found = [f for f in files if (font_dir / f).exists()]
    if files:
        label = f"Found ({len(found)} files)" if found else "Not found"
        console.check(bool(found), f"MesloLGS NF fonts: {label}")
        if not found:
            plan.append("Install MesloLGS NF fonts")
    print()

    console.header("Optional Components")
    vm = profile.version_manager
    if vm is not None:
        name = str(vm.get("name") or "nvm")
        vm_dir = ctx.expand(str(vm.get("dir") or f"~/.{name}"))
        ok = (vm_dir / str(vm.get("marker") or f"{name}.sh")).is_file()
        console.check(ok, f"{name}: {'Installed' if ok else 'Not installed (will be installed)'}")
        if not ok:
            plan.append(f"Install {name}")
    else:
        console.info("Version manager disabled in profile")
    print()

    console.header("Installation Summary")
    if plan:
        print("The installation would:")
        for i, item in enumerate(plan, 1):
            print(f"  {i}. {item}")
    else:
        console.success("Everything is already installed; install would only refresh configuration files")
    print()
    return plan


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="shellforge-status", description="Report installed vs missing components.")
    p.add_argument("--profile", default=None, help="Path to a profile manifest (YAML)")
    args = p.parse_args(argv)

    colorama_init()
    try:
        profile = load_profile(args.profile)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.error(f"Cannot load profile: {e}")
        return 0
    report(RunContext(profile=profile, os_info=detect_os(), dry_run=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
