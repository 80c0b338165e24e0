from __future__ import annotations

import os
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

import requests

from .lib.command import Runner, run_cmd
from .lib.osinfo import OsInfo
from .lib.retry import RetryPolicy
from .lib.shells import SHELLS_FILE, current_login_shell
from .profile import Profile
from .state import StepState

EXISTING_SUFFIX = ":existing"


class Ledger:
    """Ordered record of completed install actions for the run summary."""

    def __init__(self) -> None:
        self._items: List[str] = []

    def record(self, tag: str) -> None:
        self._items.append(tag)

    def record_existing(self, tag: str) -> None:
        self._items.append(tag + EXISTING_SUFFIX)

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def installed(self) -> List[str]:
        return [i for i in self._items if not i.endswith(EXISTING_SUFFIX)]

    def existing(self) -> List[str]:
        return [i for i in self._items if i.endswith(EXISTING_SUFFIX)]

    def __len__(self) -> int:
        return len(self._items)


@dataclass
class ShellEnvironment:
    """What the run produced, for the caller to apply explicitly."""

    shell_path: Optional[str] = None
    framework_dir: Optional[str] = None
    theme: Optional[str] = None
    plugins: List[str] = field(default_factory=list)
    default_shell_changed: bool = False


@dataclass
class RunContext:
    profile: Profile
    os_info: OsInfo
    home: Path = field(default_factory=Path.home)
    dry_run: bool = False
    runner: Runner = run_cmd
    which: Callable[[str], Optional[str]] = shutil.which
    http: Any = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep
    environ: Any = field(default_factory=lambda: os.environ)
    login_shell: Callable[[], Optional[str]] = current_login_shell
    shells_file: Path = SHELLS_FILE
    ledger: Ledger = field(default_factory=Ledger)
    warnings: List[str] = field(default_factory=list)
    environment: ShellEnvironment = field(default_factory=ShellEnvironment)
    package_cache_refreshed: bool = False
    on_state: Optional[Callable[[StepState], None]] = None

    def mark(self, state: StepState) -> None:
        """Report progress of the running step, if a pipeline is listening."""
        if self.on_state is not None:
            self.on_state(state)

    def retrying(self, attempt: int, exc: BaseException) -> None:
        self.mark(StepState.RETRYING)

    @property
    def retry_policy(self) -> RetryPolicy:
        return self.profile.retry_policy

    def expand(self, path: str) -> Path:
        """Resolve a profile path ("~/...") against the target home."""
        if path == "~":
            return self.home
        if path.startswith("~/"):
            return self.home / path[2:]
        return Path(path)

    @property
    def framework_dir(self) -> Path:
        return self.expand(str(self.profile.framework.get("dir") or "~/.oh-my-zsh"))

    @property
    def framework_custom_dir(self) -> Path:
        custom = self.environ.get("ZSH_CUSTOM")
        return Path(custom) if custom else self.framework_dir / "custom"

    @property
    def theme_dir(self) -> Path:
        return self.framework_custom_dir / "themes" / self.profile.theme_name

    def plugin_dir(self, name: str) -> Path:
        return self.framework_custom_dir / "plugins" / name
