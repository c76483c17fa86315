import os
from dataclasses import dataclass, field
from enum import Enum

from exceptions import (
    CommandNotFoundError,
    ExecutionError,
    ProcessError,
    ToolTimeoutError,
)
from optimizers.base import BaseOptimizer
from schemas import RunResult
from utils.subprocess_runner import EXIT_COMMAND_NOT_FOUND, run_tool

# Some tools (pngcrush, pngout) exit 0 but print these on stdout
_FAILURE_MARKERS = ("error", "permission")


class ArgStrategy(str, Enum):
    """How the target path is passed to a tool."""

    NONE = "none"  # <args> <path>, tool rewrites the file in place
    OUTPUT_FLAG = "output_flag"  # <args> <flag> <path> <path>
    EXTENSION = "extension"  # <args> --ext=.<ext> -- <path> (pngquant)


@dataclass(frozen=True)
class Command:
    """Executable, base arguments and timeout of one external tool."""

    executable: str
    args: tuple[str, ...] = field(default_factory=tuple)
    timeout: int = 60

    @property
    def name(self) -> str:
        return os.path.basename(self.executable)

    async def execute(self, extra_args: list[str]) -> RunResult:
        """Run the tool and interpret its exit status.

        Raises:
            CommandNotFoundError: Executable missing (exit code 127).
            ProcessError: Non-zero exit, or an error reported on stdout.
            ToolTimeoutError: Process killed after `timeout` seconds.
        """
        cmd = [self.executable, *self.args, *extra_args]
        result = await run_tool(cmd, timeout=self.timeout)

        if result.exit_code == EXIT_COMMAND_NOT_FOUND:
            raise CommandNotFoundError(
                f"Command {self.executable} not found",
                exit_code=result.exit_code,
                stderr=result.stderr,
                tool=self.name,
            )

        stdout = result.stdout.lower()
        if not result.success or any(m in stdout for m in _FAILURE_MARKERS):
            output = (result.stderr or result.stdout)[:500]
            raise ProcessError(
                f"{self.name} failed with exit code {result.exit_code}: {output}",
                exit_code=result.exit_code,
                stderr=result.stderr,
                tool=self.name,
                command=" ".join(cmd),
            )

        return result


class CommandOptimizer(BaseOptimizer):
    """Runs a single tool against the file."""

    def __init__(
        self,
        command: Command,
        strategy: ArgStrategy = ArgStrategy.NONE,
        output_flag: str | None = None,
    ):
        if strategy is ArgStrategy.OUTPUT_FLAG and not output_flag:
            raise ValueError("OUTPUT_FLAG strategy requires an output_flag")
        self.command = command
        self.strategy = strategy
        self.output_flag = output_flag

    def extra_args(self, path: str) -> list[str]:
        if self.strategy is ArgStrategy.OUTPUT_FLAG:
            return [self.output_flag, path, path]
        if self.strategy is ArgStrategy.EXTENSION:
            ext = os.path.splitext(path)[1]
            return [f"--ext={ext}", "--", path]
        return [path]

    async def optimize(self, path: str) -> None:
        try:
            await self.command.execute(self.extra_args(path))
        except (ProcessError, ToolTimeoutError) as e:
            raise ExecutionError(
                f"{self.command.name} could not optimize {path}: {e.message}",
                cause=e,
                tool=self.command.name,
                path=path,
            ) from e

    def __repr__(self) -> str:
        return f"CommandOptimizer({self.command.name!r})"
