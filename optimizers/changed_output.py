import asyncio
import os
import shutil

from optimizers.base import BaseOptimizer
from utils.logging import get_logger

logger = get_logger("optimizers.output")

DEFAULT_OUTPUT_PATTERN = "%basename%/%filename%%ext%"


def render_output_path(pattern: str, path: str) -> str:
    """Substitute %basename% (directory), %filename% (stem) and %ext% (".png")."""
    filename, ext = os.path.splitext(os.path.basename(path))
    return (
        pattern.replace("%basename%", os.path.dirname(path) or ".")
        .replace("%filename%", filename)
        .replace("%ext%", ext)
    )


class ChangedOutputOptimizer(BaseOptimizer):
    """Runs the inner optimizer and never accepts a bigger file.

    The output pattern decides where the inner optimizer works:
    - it resolves to the input path: the file is optimized in place and
      restored from a backup if the tool fails or makes it larger.
    - it resolves elsewhere: the input is copied there, optimized, and
      moved over the original only when strictly smaller. The copy is
      removed on any failure.
    """

    def __init__(self, output_pattern: str, optimizer: BaseOptimizer):
        self.output_pattern = output_pattern
        self.optimizer = optimizer

    def output_path(self, path: str) -> str:
        return render_output_path(self.output_pattern, path)

    def unwrap(self) -> BaseOptimizer:
        return self.optimizer.unwrap()

    async def optimize(self, path: str) -> None:
        output_path = self.output_path(path)
        if os.path.normpath(output_path) == os.path.normpath(path):
            await self._optimize_in_place(path)
        else:
            await self._optimize_copy(path, output_path)

    async def _optimize_in_place(self, path: str) -> None:
        original = await asyncio.to_thread(_read_bytes, path)

        try:
            await self.optimizer.optimize(path)
        except BaseException:
            # A tool killed or failing mid-write must not leave a broken file
            await asyncio.to_thread(_write_bytes, path, original)
            raise

        optimized_size = await asyncio.to_thread(os.path.getsize, path)
        if optimized_size > len(original):
            logger.debug(
                f"Optimized file is larger, restoring {path}",
                extra={"context": {"path": path, "original_size": len(original),
                                   "optimized_size": optimized_size}},
            )
            await asyncio.to_thread(_write_bytes, path, original)

    async def _optimize_copy(self, path: str, output_path: str) -> None:
        original_size = await asyncio.to_thread(os.path.getsize, path)

        try:
            await asyncio.to_thread(_copy_to, path, output_path)
            await self.optimizer.optimize(output_path)

            optimized_size = await asyncio.to_thread(os.path.getsize, output_path)
            if optimized_size < original_size:
                # shutil.move also works when output_path is on another filesystem
                await asyncio.to_thread(shutil.move, output_path, path)
                return
        except BaseException:
            _discard(output_path)
            raise

        logger.debug(
            f"No size reduction for {path}, keeping original",
            extra={"context": {"path": path, "original_size": original_size,
                               "optimized_size": optimized_size}},
        )
        _discard(output_path)

    def __repr__(self) -> str:
        return f"ChangedOutputOptimizer({self.output_pattern!r}, {self.optimizer!r})"


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _copy_to(path: str, output_path: str) -> None:
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    shutil.copyfile(path, output_path)


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
