"""Tests for POST /optimize."""

from unittest.mock import patch

from config import settings
from schemas import RunResult


def _shrinking_tool(calls):
    async def fake_run(cmd, timeout=None):
        calls.append(cmd)
        path = cmd[-1]
        with open(path, "rb") as f:
            data = f.read()
        with open(path, "wb") as f:
            f.write(data[: len(data) // 2])
        return RunResult(exit_code=0)

    return fake_run


def test_optimize_png_smart(client, sample_png):
    calls = []
    with patch("optimizers.command.run_tool", side_effect=_shrinking_tool(calls)):
        resp = client.post("/optimize", files={"file": ("photo.png", sample_png, "image/png")})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.headers["x-optimizer"] == "smart"
    assert int(resp.headers["x-original-size"]) == len(sample_png)
    assert int(resp.headers["x-optimized-size"]) == len(resp.content)
    assert len(resp.content) < len(sample_png)
    assert len(calls) == 1
    assert calls[0][0].endswith("pngquant")


def test_optimize_named_optimizer(client, sample_jpeg):
    calls = []
    with patch("optimizers.command.run_tool", side_effect=_shrinking_tool(calls)):
        resp = client.post(
            "/optimize",
            params={"optimizer": "jpegoptim"},
            files={"file": ("photo.jpg", sample_jpeg, "image/jpeg")},
        )
    assert resp.status_code == 200
    assert calls[0][0].endswith("jpegoptim")


def test_optimize_tool_failure_returns_original(client, sample_png):
    """Default ignore_errors: a broken tool leaves the upload untouched."""

    async def failing(cmd, timeout=None):
        return RunResult(exit_code=1, stderr="broken")

    with patch("optimizers.command.run_tool", side_effect=failing):
        resp = client.post("/optimize", files={"file": ("photo.png", sample_png, "image/png")})

    assert resp.status_code == 200
    assert resp.content == sample_png
    assert resp.headers["x-reduction-percent"] == "0.0"


def test_optimize_unknown_optimizer(client, sample_png):
    resp = client.post(
        "/optimize",
        params={"optimizer": "webp"},
        files={"file": ("photo.png", sample_png, "image/png")},
    )
    assert resp.status_code == 404
    data = resp.json()
    assert data["error"] == "optimizer_not_found"
    assert data["name"] == "webp"


def test_optimize_empty_file(client):
    resp = client.post("/optimize", files={"file": ("photo.png", b"", "image/png")})
    assert resp.status_code == 400
    assert resp.json()["error"] == "bad_request"


def test_optimize_file_too_large(client, sample_png):
    with patch.object(settings, "max_file_size_bytes", 10):
        resp = client.post("/optimize", files={"file": ("photo.png", sample_png, "image/png")})
    assert resp.status_code == 413
    assert resp.json()["error"] == "file_too_large"
