import asyncio
import time

from config import settings
from exceptions import ToolTimeoutError
from schemas import RunResult

# Shell convention for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


async def run_tool(
    cmd: list[str],
    timeout: int | None = None,
) -> RunResult:
    """Run a CLI tool against files on disk and capture its output.

    Tools read and write the target file themselves; nothing is piped
    through stdin. Exit status is reported, not judged: interpreting it
    is up to the caller.

    Args:
        cmd: Command and arguments (e.g., ["optipng", "-o2", "photo.png"]).
        timeout: Seconds before killing the process.
            Defaults to settings.tool_timeout_seconds.

    Returns:
        RunResult with exit code, decoded stdout/stderr and wall time.
        An executable that cannot be spawned yields exit code 127.

    Raises:
        ToolTimeoutError: If the process exceeds the timeout.
    """
    if timeout is None:
        timeout = settings.tool_timeout_seconds

    started = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as e:
        return RunResult(
            exit_code=EXIT_COMMAND_NOT_FOUND,
            stderr=str(e),
            duration=time.monotonic() - started,
        )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ToolTimeoutError(
            f"Tool {cmd[0]} timed out after {timeout}s",
            tool=cmd[0],
            timeout=timeout,
        )

    return RunResult(
        exit_code=proc.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        duration=time.monotonic() - started,
    )
