import io
import os

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import app
from optimizers.base import BaseOptimizer


class RecordingOptimizer(BaseOptimizer):
    """Test double: records calls, optionally rewrites the file or fails."""

    def __init__(self, name="fake", error=None, output=None, calls=None):
        self.name = name
        self.error = error
        self.output = output
        self.calls = calls if calls is not None else []

    async def optimize(self, path: str) -> None:
        self.calls.append((self.name, path))
        if self.error is not None:
            raise self.error
        if self.output is not None:
            with open(path, "wb") as f:
                f.write(self.output)

    def __repr__(self):
        return f"RecordingOptimizer({self.name!r})"


@pytest.fixture
def make_optimizer():
    """Factory for RecordingOptimizer instances."""
    return RecordingOptimizer


def _make_png(size=(60, 60)):
    # Noise keeps the encoder from shrinking it to almost nothing
    img = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_png():
    return _make_png()


@pytest.fixture
def sample_jpeg():
    img = Image.new("RGB", (32, 32), (200, 30, 30))
    buf = io.BytesIO()
    img.save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def sample_gif():
    img = Image.new("RGB", (16, 16), (0, 0, 255))
    buf = io.BytesIO()
    img.save(buf, format="GIF")
    return buf.getvalue()


@pytest.fixture
def sample_svg():
    return (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
        b'<rect width="10" height="10" fill="red"/></svg>'
    )


@pytest.fixture
def png_file(tmp_path, sample_png):
    path = tmp_path / "photo.png"
    path.write_bytes(sample_png)
    return path


@pytest.fixture
def client():
    """FastAPI test client with lifespan (registry built on startup)."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
