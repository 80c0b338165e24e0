from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import requests

from shellforge.context import RunContext
from shellforge.lib.command import CmdResult
from shellforge.lib.osinfo import OsInfo
from shellforge.profile import Profile, load_profile


class FakeWhich:
    """shutil.which stand-in backed by a set of command names."""

    def __init__(self, *available: str) -> None:
        self.available = set(available)

    def add(self, name: str) -> None:
        self.available.add(name)

    def __call__(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.available else None


class FakeRunner:
    """Records every command; handlers decide the result and side effects.

    A handler receives (argv, kwargs) and returns a CmdResult or None
    (None means "succeed with empty output").
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self.handlers: List[Callable[[List[str], dict], Optional[CmdResult]]] = []

    def on(self, handler: Callable[[List[str], dict], Optional[CmdResult]]) -> None:
        self.handlers.append(handler)

    def __call__(self, argv, **kwargs) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(kwargs.get("env"))
        for handler in self.handlers:
            result = handler(argv, kwargs)
            if result is not None:
                return result
        return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

    def matching(self, *words: str) -> List[List[str]]:
        return [c for c in self.calls if all(w in c for w in words)]


def fail(argv, returncode: int = 1) -> CmdResult:
    return CmdResult(argv=list(argv), returncode=returncode, stdout="", stderr="boom")


class FakeResponse:
    def __init__(self, body: bytes = b"data", status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeHttp:
    """requests.Session stand-in.

    Per-URL scripts are consumed in order; each item is a FakeResponse or an
    exception to raise. Unscripted URLs answer with a small non-empty body.
    """

    def __init__(self) -> None:
        self.gets: List[str] = []
        self.heads: List[str] = []
        self.scripts: Dict[str, list] = {}
        self.offline = False

    def script(self, url: str, *outcomes) -> None:
        self.scripts[url] = list(outcomes)

    def _next(self, url: str):
        if self.offline:
            raise requests.ConnectionError("offline")
        queue = self.scripts.get(url)
        outcome = queue.pop(0) if queue else FakeResponse()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        self.gets.append(url)
        return self._next(url)

    def head(self, url, **kwargs):
        self.heads.append(url)
        return self._next(url)


class Sleeps(list):
    def __call__(self, seconds: float) -> None:
        self.append(seconds)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def profile() -> Profile:
    return load_profile()


@pytest.fixture
def make_ctx(home: Path, tmp_path: Path, profile: Profile):
    def _make(**overrides) -> RunContext:
        shells_file = tmp_path / "shells"
        if not shells_file.exists():
            shells_file.write_text("/bin/sh\n/bin/bash\n", encoding="utf-8")
        kwargs = dict(
            profile=profile,
            os_info=OsInfo(id="ubuntu", version="22.04"),
            home=home,
            runner=FakeRunner(),
            which=FakeWhich(),
            http=FakeHttp(),
            sleep=Sleeps(),
            environ={},
            login_shell=lambda: "/bin/bash",
            shells_file=shells_file,
        )
        kwargs.update(overrides)
        return RunContext(**kwargs)

    return _make
