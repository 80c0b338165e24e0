from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import CloneError, ProvisionError
from ..state import StepState
from .retry import retry

if TYPE_CHECKING:
    from ..context import RunContext

logger = logging.getLogger(__name__)


def is_repo(path: Path) -> bool:
    return (path / ".git").is_dir()


def remove_dir(path: Path) -> None:
    """Remove a corrupt checkout; failure here is structural."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise ProvisionError(f"Failed to remove corrupted directory {path}: {e}") from e


def clone_or_update(ctx: "RunContext", repo_url: str, target_dir: Path, depth: int = 1) -> bool:
    """Clone repo_url into target_dir unless a valid checkout is already there.

    Returns True when a clone happened, False when the checkout already existed.
    """

    if is_repo(target_dir):
        logger.info("%s already present at %s", repo_url, target_dir)
        return False

    if target_dir.exists():
        logger.warning("%s exists but is not a repository; removing", target_dir)
        remove_dir(target_dir)

    target_dir.parent.mkdir(parents=True, exist_ok=True)
    argv = ["git", "clone", f"--depth={depth}", repo_url, str(target_dir)]

    def _attempt() -> None:
        ctx.mark(StepState.INSTALLING)
        r = ctx.runner(argv, check=False, dry_run=ctx.dry_run)
        if ctx.dry_run:
            return
        if r.ok and is_repo(target_dir):
            return
        remove_dir(target_dir)
        if r.ok:
            raise CloneError(f"Clone of {repo_url} succeeded but {target_dir} is not a repository")
        raise CloneError(f"git clone {repo_url} exited {r.returncode}")

    retry(_attempt, policy=ctx.retry_policy, what=f"clone {repo_url}", sleep=ctx.sleep, on_retry=ctx.retrying)
    logger.info("Cloned %s into %s", repo_url, target_dir)
    return True
