from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from colorama import init as colorama_init

from . import console
from .context import RunContext, ShellEnvironment
from .errors import PrereqError
from .lib.osinfo import detect_os
from .lib.preflight import run_preflight
from .logging_utils import configure_logging
from .pipeline import PipelineResult, Step, run_pipeline
from .profile import load_profile
from .steps import (
    InstallAssetsStep,
    InstallDependenciesStep,
    InstallFrameworkStep,
    InstallPluginsStep,
    InstallShellStep,
    InstallThemeStep,
    InstallVersionManagerStep,
    SetDefaultShellStep,
)

logger = logging.getLogger(__name__)


def build_steps() -> List[Step]:
    return [
        InstallShellStep(),
        InstallDependenciesStep(),
        InstallFrameworkStep(),
        InstallThemeStep(),
        InstallPluginsStep(),
        InstallAssetsStep(),
        InstallVersionManagerStep(),
        SetDefaultShellStep(),
    ]


@dataclass
class InstallReport:
    exit_code: int
    log_path: str
    ledger: List[str] = field(default_factory=list)
    result: Optional[PipelineResult] = None
    environment: Optional[ShellEnvironment] = None


def ask_yes_no(prompt: str) -> bool:
    try:
        reply = input(prompt)
    except EOFError:
        return False
    return reply.strip().lower().startswith("y")


def _intro() -> None:
    console.header("ZSH Custom Terminal Setup")
    print()
    print("This will install and configure:")
    console.bullet_list(
        [
            "ZSH shell",
            "Oh My Zsh framework",
            "Powerlevel10k theme",
            "Custom plugins and configurations",
            "Philosophy quotes and ASCII art",
            "NVM (Node Version Manager)",
        ],
        symbol="•",
    )
    print()


def show_summary(ctx: RunContext, log_path: str) -> None:
    console.header("Installation Summary")
    installed = ctx.ledger.installed()
    existing = ctx.ledger.existing()
    if installed:
        console.success("Successfully installed/configured:")
        console.bullet_list(installed, symbol="✓")
    if existing:
        console.info("Already satisfied:")
        console.bullet_list(existing, symbol="·")
    print()
    console.info(f"Log file: {log_path}")


def _report_failure(ctx: RunContext, log_path: str) -> None:
    console.info(f"Log file available at: {log_path}")
    if len(ctx.ledger):
        console.info("Items installed before failure:")
        console.bullet_list(ctx.ledger.items)


def run(
    *,
    auto_confirm: bool = False,
    profile_path: Optional[str] = None,
    log_path: Optional[str] = None,
    dry_run: bool = False,
    verbose: bool = False,
    ctx: Optional[RunContext] = None,
    confirm: Callable[[str], bool] = ask_yes_no,
    interactive: Optional[bool] = None,
) -> InstallReport:
    """Run pre-flight checks and the install pipeline."""

    actual_log_path = configure_logging(log_path=log_path, also_console=verbose)

    if ctx is None:
        ctx = RunContext(profile=load_profile(profile_path), os_info=detect_os(), dry_run=dry_run)

    _intro()

    if interactive is None:
        interactive = sys.stdin.isatty()
    if not auto_confirm and not interactive:
        auto_confirm = True
        console.info("Running in non-interactive mode")
    if auto_confirm:
        console.info("Running in auto-confirm mode")
    elif not confirm("Do you want to continue? (y/n) "):
        console.info("Installation cancelled")
        return InstallReport(exit_code=0, log_path=actual_log_path)

    try:
        run_preflight(ctx, auto_confirm=auto_confirm, confirm=confirm)
    except PrereqError as e:
        console.error(str(e))
        _report_failure(ctx, actual_log_path)
        return InstallReport(exit_code=1, log_path=actual_log_path, ledger=ctx.ledger.items)
    print()

    try:
        result = run_pipeline(ctx, build_steps())
    except KeyboardInterrupt:
        console.error("Installation interrupted")
        _report_failure(ctx, actual_log_path)
        return InstallReport(exit_code=130, log_path=actual_log_path, ledger=ctx.ledger.items)
    except Exception:
        logger.exception("Installer failed")
        _report_failure(ctx, actual_log_path)
        raise

    report = InstallReport(
        exit_code=0 if result.ok else 1,
        log_path=actual_log_path,
        ledger=ctx.ledger.items,
        result=result,
        environment=ctx.environment,
    )

    for w in result.warnings:
        logger.warning("Run warning: %s", w)

    if not result.ok:
        console.error("Installation completed with errors")
        console.error(f"Failed steps: {', '.join(result.failed_steps)}")
        show_summary(ctx, actual_log_path)
        _report_failure(ctx, actual_log_path)
        return report

    console.header("Installation Complete!")
    console.success("ZSH has been installed and configured successfully!")
    print()
    show_summary(ctx, actual_log_path)
    print()
    console.info("Next steps:")
    print("  1. Log out and log back in (or restart your terminal)")
    print("  2. New terminals will show the startup banner with a daily quote")
    print("  3. Run 'p10k configure' to customize the Powerlevel10k theme (optional)")
    print()
    if ctx.os_info.is_wsl:
        console.warning("WSL detected: make sure your terminal font is set to 'MesloLGS NF'")
    if ctx.environment.shell_path:
        console.info(f"To start using ZSH now without logging out, run: exec {ctx.environment.shell_path}")
    return report


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="shellforge-install",
        description="Install zsh, Oh My Zsh, Powerlevel10k, plugins and the startup banner.",
        epilog="Non-interactive invocations auto-confirm. All actions are logged to a per-run log file.",
    )
    p.add_argument("-y", "--yes", action="store_true", help="Run without confirmation prompt")
    p.add_argument("--profile", default=None, help="Path to a profile manifest (YAML)")
    p.add_argument("--log", default=None, help="Path to the run log")
    p.add_argument("--dry-run", action="store_true", help="Log actions without executing them")
    p.add_argument("--verbose", action="store_true", help="Also echo the run log to the console")

    args = p.parse_args(argv)

    colorama_init()
    report = run(
        auto_confirm=bool(args.yes),
        profile_path=args.profile,
        log_path=args.log,
        dry_run=bool(args.dry_run),
        verbose=bool(args.verbose),
    )
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
