import os
from datetime import datetime

import pytest

from shellforge.errors import ProvisionError
from shellforge.lib.assets import backup_path_for, move_aside, write_asset
from shellforge.lib.manifests import assets_dir
from shellforge.pipeline import StepState
from shellforge.profile import Profile
from shellforge.steps import InstallAssetsStep
from shellforge.steps.step_60_install_assets import render_rc


def test_backup_name_is_timestamped_and_unique(tmp_path):
    target = tmp_path / ".zshrc"
    now = datetime(2024, 3, 1, 8, 30, 5)
    first = backup_path_for(target, now=now)
    assert first.name == ".zshrc.backup.20240301_083005"

    first.write_text("x")
    assert backup_path_for(target, now=now).name == ".zshrc.backup.20240301_083005_1"


def test_write_asset_backs_up_before_overwriting(tmp_path):
    target = tmp_path / ".zshrc"
    target.write_bytes(b"user config\n")

    backup = write_asset(target, b"new config\n", backup=True)

    assert backup is not None
    assert backup.read_bytes() == b"user config\n"
    assert target.read_bytes() == b"new config\n"


def test_write_asset_without_backup_flag(tmp_path):
    target = tmp_path / "sub" / "quotes.txt"
    assert write_asset(target, b"q\n") is None
    assert target.read_bytes() == b"q\n"


def test_executable_asset_gets_exec_bit(tmp_path):
    target = tmp_path / "startup.zsh"
    write_asset(target, b"#!/bin/zsh\n", executable=True)
    assert os.access(target, os.X_OK)


def test_move_aside_renames_directory(tmp_path):
    d = tmp_path / ".oh-my-zsh"
    d.mkdir()
    dest = move_aside(d)
    assert not d.exists()
    assert dest.is_dir()
    assert dest.name.startswith(".oh-my-zsh.backup.")


def test_rc_template_uses_installed_plugins(make_ctx):
    ctx = make_ctx()
    ctx.environment.theme = "powerlevel10k/powerlevel10k"
    ctx.environment.plugins = ["git", "zsh-autosuggestions"]

    rendered = render_rc((assets_dir() / "zshrc").read_text(encoding="utf-8"), ctx)

    assert 'ZSH_THEME="powerlevel10k/powerlevel10k"' in rendered
    assert "plugins=(git zsh-autosuggestions)" in rendered
    assert "__SHELLFORGE" not in rendered
    assert 'export ZSH="$HOME/.oh-my-zsh"' in rendered
    assert 'export NVM_DIR="$HOME/.nvm"' in rendered


def test_rc_template_follows_configured_install_dirs(make_ctx, profile, home, tmp_path):
    raw = dict(
        profile.raw,
        framework=dict(profile.framework, dir="~/.omz"),
        version_manager=dict(profile.version_manager, dir=str(tmp_path / "tools" / "nvm")),
    )
    ctx = make_ctx(profile=Profile(raw=raw))

    rendered = render_rc((assets_dir() / "zshrc").read_text(encoding="utf-8"), ctx)

    assert 'export ZSH="$HOME/.omz"' in rendered
    assert f'export NVM_DIR="{tmp_path / "tools" / "nvm"}"' in rendered

    ctx.environment.framework_dir = str(home / "frameworks" / "omz")
    rendered = render_rc((assets_dir() / "zshrc").read_text(encoding="utf-8"), ctx)
    assert 'export ZSH="$HOME/frameworks/omz"' in rendered


def test_assets_step_backs_up_existing_rc_and_is_idempotent(make_ctx, home):
    rc = home / ".zshrc"
    rc.write_text("# my old rc\n", encoding="utf-8")
    ctx = make_ctx()
    ctx.environment.plugins = ["git", "zsh-autosuggestions", "zsh-syntax-highlighting"]

    assert InstallAssetsStep().run(ctx) == StepState.SUCCEEDED

    backups = sorted(home.glob(".zshrc.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "# my old rc\n"
    assert "zsh-syntax-highlighting" in rc.read_text(encoding="utf-8")
    assert (home / ".config" / "zsh" / "quotes.txt").is_file()
    assert (home / ".config" / "zsh" / "ascii_art.txt").is_file()
    assert os.access(home / ".config" / "zsh" / "startup.zsh", os.X_OK)
    assert "backup:.zshrc" in ctx.ledger.items
    assert "config:.zshrc" in ctx.ledger.items

    again = make_ctx()
    again.environment.plugins = list(ctx.environment.plugins)
    assert InstallAssetsStep().run(again) == StepState.SKIPPED
    assert len(sorted(home.glob(".zshrc.backup.*"))) == 1
    assert all(item.endswith(":existing") for item in again.ledger.items)


def test_missing_required_asset_fails_the_step(make_ctx, profile):
    raw = dict(profile.raw)
    raw["assets"] = [{"source": "no-such-file", "target": "~/.zshrc", "required": True}]
    ctx = make_ctx(profile=Profile(raw=raw))

    with pytest.raises(ProvisionError, match="no-such-file"):
        InstallAssetsStep().run(ctx)


def test_missing_optional_asset_is_skipped(make_ctx, profile):
    raw = dict(profile.raw)
    raw["assets"] = [{"source": "no-such-file", "target": "~/.thing"}]
    ctx = make_ctx(profile=Profile(raw=raw))

    assert InstallAssetsStep().run(ctx) == StepState.SKIPPED
