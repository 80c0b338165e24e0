from pathlib import Path

import pytest

from shellforge.errors import CloneError
from shellforge.lib.git import clone_or_update, is_repo

from conftest import fail

REPO = "https://github.com/zsh-users/zsh-autosuggestions"


def _clone_creates_repo(argv, kw):
    if argv[:2] == ["git", "clone"]:
        (Path(argv[-1]) / ".git").mkdir(parents=True)
    return None


def test_existing_checkout_is_left_alone(make_ctx, tmp_path):
    target = tmp_path / "plugin"
    (target / ".git").mkdir(parents=True)
    ctx = make_ctx()

    assert clone_or_update(ctx, REPO, target) is False
    assert ctx.runner.calls == []


def test_clone_into_fresh_directory(make_ctx, tmp_path):
    target = tmp_path / "custom" / "plugins" / "zsh-autosuggestions"
    ctx = make_ctx()
    ctx.runner.on(_clone_creates_repo)

    assert clone_or_update(ctx, REPO, target) is True
    assert ctx.runner.calls == [["git", "clone", "--depth=1", REPO, str(target)]]
    assert is_repo(target)


def test_corrupt_directory_is_replaced(make_ctx, tmp_path):
    target = tmp_path / "plugin"
    target.mkdir()
    (target / "leftover").write_text("x")
    ctx = make_ctx()
    ctx.runner.on(_clone_creates_repo)

    assert clone_or_update(ctx, REPO, target) is True
    assert not (target / "leftover").exists()
    assert is_repo(target)


def test_clone_without_repository_counts_as_failure(make_ctx, tmp_path):
    target = tmp_path / "plugin"
    ctx = make_ctx()

    def half_clone(argv, kw):
        Path(argv[-1]).mkdir(parents=True, exist_ok=True)
        return None

    ctx.runner.on(half_clone)

    with pytest.raises(CloneError, match="not a repository"):
        clone_or_update(ctx, REPO, target)
    assert len(ctx.runner.calls) == 3
    assert not target.exists()


def test_clone_recovers_on_second_attempt(make_ctx, tmp_path):
    target = tmp_path / "plugin"
    ctx = make_ctx()
    attempts = []

    def flaky(argv, kw):
        attempts.append(argv)
        if len(attempts) == 1:
            return fail(argv, 128)
        return _clone_creates_repo(argv, kw)

    ctx.runner.on(flaky)
    assert clone_or_update(ctx, REPO, target) is True
    assert len(attempts) == 2
    assert ctx.sleep == [5]
