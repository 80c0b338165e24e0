from pathlib import Path

import pytest
import requests

from shellforge.errors import DownloadError, ProvisionError
from shellforge.lib.net import download_with_retry, is_online, run_remote_installer

from conftest import FakeResponse, fail

URL = "https://example.invalid/file"


def test_download_writes_body(make_ctx, tmp_path):
    ctx = make_ctx()
    ctx.http.script(URL, FakeResponse(b"hello"))
    dest = tmp_path / "out" / "file"

    assert download_with_retry(ctx, URL, dest) == dest
    assert dest.read_bytes() == b"hello"


def test_transport_error_is_retried(make_ctx, tmp_path):
    ctx = make_ctx()
    ctx.http.script(URL, requests.ConnectionError("reset"), FakeResponse(b"ok"))
    dest = tmp_path / "file"

    download_with_retry(ctx, URL, dest)
    assert dest.read_bytes() == b"ok"
    assert len(ctx.http.gets) == 2


def test_empty_body_exhausts_retries_and_leaves_no_file(make_ctx, tmp_path):
    ctx = make_ctx()
    ctx.http.script(URL, FakeResponse(b""), FakeResponse(b""), FakeResponse(b""))
    dest = tmp_path / "file"

    with pytest.raises(DownloadError, match="empty"):
        download_with_retry(ctx, URL, dest)
    assert len(ctx.http.gets) == 3
    assert not dest.exists()


def test_http_error_status_removes_partial_output(make_ctx, tmp_path):
    ctx = make_ctx()
    ctx.http.script(URL, *[FakeResponse(b"not found", status_code=404)] * 3)
    dest = tmp_path / "file"
    dest.write_bytes(b"stale partial")

    with pytest.raises(DownloadError):
        download_with_retry(ctx, URL, dest)
    assert not dest.exists()


def test_online_when_any_endpoint_answers(make_ctx):
    ctx = make_ctx()
    ctx.http.script("https://a.invalid", requests.ConnectionError("down"))
    ctx.http.script("https://b.invalid", FakeResponse(status_code=503))

    assert is_online(ctx, ["https://a.invalid", "https://b.invalid"]) is True
    assert ctx.http.heads == ["https://a.invalid", "https://b.invalid"]


def test_offline_when_no_endpoint_answers(make_ctx):
    ctx = make_ctx()
    ctx.http.offline = True
    assert is_online(ctx, ["https://a.invalid", "https://b.invalid"]) is False


def test_remote_installer_runs_once_and_cleans_up(make_ctx):
    ctx = make_ctx()
    run_remote_installer(ctx, URL, interpreter=["sh"], name="demo", env={"X": "1"})

    (argv,) = ctx.runner.calls
    assert argv[0] == "sh"
    assert ctx.runner.envs == [{"X": "1"}]
    assert not Path(argv[1]).exists()


def test_remote_installer_failure_is_not_retried(make_ctx):
    ctx = make_ctx()
    ctx.runner.on(lambda argv, kw: fail(argv, 2))

    with pytest.raises(ProvisionError, match="exit code 2"):
        run_remote_installer(ctx, URL, interpreter=["bash"], name="demo")
    assert len(ctx.runner.calls) == 1
