"""Tests for the process spawner (real subprocesses)."""

import sys

import pytest

from exceptions import ToolTimeoutError
from utils.subprocess_runner import EXIT_COMMAND_NOT_FOUND, run_tool


@pytest.mark.asyncio
async def test_run_tool_success():
    result = await run_tool([sys.executable, "-c", "print('hello')"])
    assert result.success
    assert result.exit_code == 0
    assert result.stdout.strip() == "hello"
    assert result.duration >= 0


@pytest.mark.asyncio
async def test_run_tool_captures_stderr():
    result = await run_tool(
        [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(2)"]
    )
    assert not result.success
    assert result.exit_code == 2
    assert result.stderr == "boom"


@pytest.mark.asyncio
async def test_run_tool_timeout():
    """Timeout kills the process and raises."""
    with pytest.raises(ToolTimeoutError) as exc_info:
        await run_tool([sys.executable, "-c", "import time; time.sleep(10)"], timeout=1)
    assert exc_info.value.details["timeout"] == 1


@pytest.mark.asyncio
async def test_run_tool_missing_executable():
    """Unspawnable executable is reported as exit code 127."""
    result = await run_tool(["/nonexistent/imgopt-tool", "file.png"])
    assert result.exit_code == EXIT_COMMAND_NOT_FOUND
    assert not result.success
