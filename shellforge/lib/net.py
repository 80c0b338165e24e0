from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Sequence

import requests

from ..errors import DownloadError, ProvisionError
from ..state import StepState
from .retry import retry

if TYPE_CHECKING:
    from ..context import RunContext

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_S = 10
READ_TIMEOUT_S = 300
PROBE_TIMEOUT = (5, 10)
CHUNK_SIZE = 64 * 1024


def is_online(ctx: "RunContext", endpoints: Sequence[str]) -> bool:
    """Best-effort online check: any HTTP response from any endpoint counts."""

    for url in endpoints:
        try:
            resp = ctx.http.head(url, timeout=PROBE_TIMEOUT, allow_redirects=True)
            resp.close()
            logger.info("Connectivity probe ok: %s (%s)", url, resp.status_code)
            return True
        except requests.RequestException as e:
            logger.info("Connectivity probe failed: %s (%s)", url, e)
    return False


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def download_with_retry(ctx: "RunContext", url: str, dest: Path) -> Path:
    """Fetch url into dest, retrying transport errors and empty bodies."""

    logger.info("Downloading %s -> %s", url, dest)
    if ctx.dry_run:
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)

    def _attempt() -> Path:
        ctx.mark(StepState.INSTALLING)
        try:
            resp = ctx.http.get(url, timeout=(CONNECT_TIMEOUT_S, READ_TIMEOUT_S), stream=True)
            try:
                resp.raise_for_status()
                with open(dest, "wb") as fh:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
            finally:
                resp.close()
        except (requests.RequestException, OSError) as e:
            _remove(dest)
            raise DownloadError(f"Download of {url} failed: {e}") from e

        if dest.stat().st_size == 0:
            _remove(dest)
            raise DownloadError(f"Downloaded file is empty: {url}")
        return dest

    return retry(
        _attempt, policy=ctx.retry_policy, what=f"download {url}", sleep=ctx.sleep, on_retry=ctx.retrying
    )


def run_remote_installer(
    ctx: "RunContext",
    url: str,
    *,
    interpreter: Sequence[str],
    name: str,
    env: Mapping[str, str] | None = None,
) -> None:
    """Download an installer script and run it unattended.

    The download is retried; the installer itself runs once.
    """

    fd, tmp = tempfile.mkstemp(prefix=f"{name}_install_", suffix=".sh")
    os.close(fd)
    script = Path(tmp)
    try:
        download_with_retry(ctx, url, script)
        if not ctx.dry_run:
            script.chmod(script.stat().st_mode | stat.S_IXUSR)
        r = ctx.runner([*interpreter, str(script)], check=False, env=env, dry_run=ctx.dry_run)
        if not r.ok:
            raise ProvisionError(f"{name} installer failed with exit code {r.returncode}")
    finally:
        _remove(script)
