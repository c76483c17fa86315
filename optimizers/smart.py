import asyncio
from types import MappingProxyType
from typing import Callable, Mapping

from exceptions import UnsupportedTypeError
from optimizers.base import BaseOptimizer
from utils.format_detect import ImageFormat, guess_type


class SmartOptimizer(BaseOptimizer):
    """Picks the optimizer based on the file's detected type."""

    def __init__(
        self,
        optimizers: Mapping[ImageFormat, BaseOptimizer],
        type_guesser: Callable[[str], ImageFormat] = guess_type,
    ):
        self.optimizers = MappingProxyType(dict(optimizers))
        self.type_guesser = type_guesser

    async def optimize(self, path: str) -> None:
        # Guessing reads the file header; errors propagate as-is
        fmt = await asyncio.to_thread(self.type_guesser, path)

        optimizer = self.optimizers.get(fmt)
        if optimizer is None:
            type_name = fmt.value if isinstance(fmt, ImageFormat) else str(fmt)
            raise UnsupportedTypeError(
                f'Optimizer for type "{type_name}" not found.',
                type=type_name,
                path=path,
            )

        await optimizer.optimize(path)
