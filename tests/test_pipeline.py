from collections import namedtuple
from pathlib import Path

import pytest

import shellforge.lib.preflight as preflight
import shellforge.main as main_mod
from shellforge.errors import ProvisionError, ShellChangeWarning
from shellforge.lib.command import CmdResult
from shellforge.pipeline import StepState, run_pipeline
from shellforge.steps import InstallThemeStep

from conftest import FakeHttp, FakeRunner, FakeWhich

TOOLS = ("sh", "grep", "sed", "awk")
Usage = namedtuple("Usage", "total used free")


class StubStep:
    def __init__(self, step_id, *, required=True, outcome=StepState.SUCCEEDED):
        self.step_id = step_id
        self.title = f"Step {step_id}"
        self.required = required
        self.outcome = outcome
        self.ran = False

    def run(self, ctx):
        self.ran = True
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


def test_required_failure_is_collected_and_run_continues(make_ctx):
    ctx = make_ctx()
    steps = [
        StubStep("a", outcome=ProvisionError("broken")),
        StubStep("b", outcome=StepState.SKIPPED),
    ]
    result = run_pipeline(ctx, steps)

    assert not result.ok
    assert result.failed_steps == ["Step a"]
    assert result.states == {"a": StepState.FAILED, "b": StepState.SKIPPED}
    assert steps[1].ran


def test_optional_failure_becomes_a_warning(make_ctx):
    ctx = make_ctx()
    ctx.warnings.append("earlier warning")
    result = run_pipeline(ctx, [StubStep("x", required=False, outcome=ShellChangeWarning("no chsh"))])

    assert result.ok
    assert result.states["x"] == StepState.FAILED
    assert result.warnings == ["earlier warning", "Step x: no chsh"]


def test_unexpected_errors_propagate(make_ctx):
    with pytest.raises(KeyError):
        run_pipeline(make_ctx(), [StubStep("x", outcome=KeyError("bug"))])


def test_retried_step_records_its_transitions(make_ctx):
    ctx = make_ctx()
    attempts = []

    def flaky_clone(argv, kw):
        attempts.append(argv)
        if len(attempts) == 1:
            return CmdResult(argv, 128, "", "reset")
        (Path(argv[-1]) / ".git").mkdir(parents=True)
        return None

    ctx.runner.on(flaky_clone)
    result = run_pipeline(ctx, [InstallThemeStep()])

    assert result.history["40_install_theme"] == [
        StepState.NOT_STARTED,
        StepState.CHECKING,
        StepState.INSTALLING,
        StepState.RETRYING,
        StepState.INSTALLING,
        StepState.SUCCEEDED,
    ]
    assert ctx.on_state is None


def test_step_states_are_terminal():
    assert StepState.SKIPPED.terminal
    assert StepState.FAILED.terminal
    assert not StepState.RETRYING.terminal


class Workstation:
    """Fake machine state that survives across install runs."""

    def __init__(self, home: Path) -> None:
        self.home = home
        self.which = FakeWhich(*TOOLS)
        self.login_shell = "/bin/bash"

    def handle(self, argv, kw):
        if argv[0] == "sh" and kw.get("env") and "ZSH" in kw["env"]:
            (Path(kw["env"]["ZSH"]) / ".git").mkdir(parents=True)
        elif argv[0] == "bash":
            nvm = self.home / ".nvm"
            nvm.mkdir(parents=True, exist_ok=True)
            (nvm / "nvm.sh").write_text("# nvm\n")
        elif argv[:2] == ["git", "clone"]:
            (Path(argv[-1]) / ".git").mkdir(parents=True)
        elif argv[0] == "chsh":
            self.login_shell = argv[-1]
        elif "install" in argv:
            self.which.add(argv[-1])
        elif argv[-1] == "--version":
            return CmdResult(argv, 0, "zsh 5.9 (x86_64-pc-linux-gnu)\n", "")
        return None

    def ctx(self, make_ctx):
        runner = FakeRunner()
        runner.on(self.handle)
        return make_ctx(
            runner=runner,
            http=FakeHttp(),
            which=self.which,
            login_shell=lambda: self.login_shell,
        )


@pytest.fixture
def workstation(home, monkeypatch, tmp_path):
    monkeypatch.setattr(preflight, "is_root", lambda: False)
    monkeypatch.setattr(preflight.shutil, "disk_usage", lambda path: Usage(2**40, 2**39, 2**39))
    monkeypatch.setattr(main_mod, "configure_logging", lambda **kw: str(tmp_path / "install.log"))
    return Workstation(home)


def _install(ctx):
    return main_mod.run(auto_confirm=True, ctx=ctx, interactive=False)


def test_fresh_install_provisions_everything(workstation, make_ctx, home):
    ctx = workstation.ctx(make_ctx)
    report = _install(ctx)

    assert report.exit_code == 0
    assert report.log_path.endswith("install.log")
    assert report.ledger[:4] == ["package:zsh", "package:git", "package:curl", "package:wget"]
    for tag in ("fonts:meslo", "framework:oh-my-zsh", "theme:powerlevel10k", "nvm", "shell:zsh"):
        assert tag in report.ledger
    assert "plugin:zsh-autosuggestions" in report.ledger
    assert "plugin:zsh-syntax-highlighting" in report.ledger

    env = report.environment
    assert env.shell_path == "/usr/bin/zsh"
    assert env.theme == "powerlevel10k/powerlevel10k"
    assert env.plugins == ["git", "zsh-autosuggestions", "zsh-syntax-highlighting"]
    assert env.default_shell_changed

    assert (home / ".oh-my-zsh" / "custom" / "themes" / "powerlevel10k" / ".git").is_dir()
    assert (home / ".local" / "share" / "fonts" / "MesloLGS NF Regular.ttf").is_file()
    assert "plugins=(git zsh-autosuggestions zsh-syntax-highlighting)" in (home / ".zshrc").read_text()
    assert workstation.login_shell == "/usr/bin/zsh"


def test_second_run_changes_nothing(workstation, make_ctx, home):
    assert _install(workstation.ctx(make_ctx)).exit_code == 0
    files_before = sorted(p.relative_to(home) for p in home.rglob("*"))

    ctx = workstation.ctx(make_ctx)
    report = _install(ctx)

    assert report.exit_code == 0
    assert report.ledger
    assert all(item.endswith(":existing") for item in report.ledger)
    assert set(report.result.states.values()) == {StepState.SKIPPED}
    assert ctx.http.gets == []
    for word in ("install", "clone", "chsh", "update"):
        assert ctx.runner.matching(word) == []
    assert sorted(p.relative_to(home) for p in home.rglob("*")) == files_before


def test_required_step_failure_exits_nonzero(workstation, make_ctx):
    ctx = workstation.ctx(make_ctx)
    ctx.runner.handlers.insert(
        0, lambda argv, kw: CmdResult(argv, 128, "", "fatal") if argv[:2] == ["git", "clone"] else None
    )

    report = _install(ctx)

    assert report.exit_code == 1
    assert "Installing Powerlevel10k Theme" in report.result.failed_steps
    assert "Installing ZSH Plugins" in report.result.failed_steps
    # later steps still ran
    assert "nvm" in report.ledger


def test_offline_machine_fails_preflight(workstation, make_ctx):
    ctx = workstation.ctx(make_ctx)
    ctx.http.offline = True

    report = _install(ctx)

    assert report.exit_code == 1
    assert report.result is None
    assert ctx.runner.calls == []


def test_declining_the_prompt_cancels_cleanly(workstation, make_ctx):
    ctx = workstation.ctx(make_ctx)
    report = main_mod.run(ctx=ctx, interactive=True, confirm=lambda q: False)

    assert report.exit_code == 0
    assert report.ledger == []
    assert ctx.http.heads == []
