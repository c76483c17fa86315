import logging

from exceptions import ImgoptError
from optimizers.base import BaseOptimizer
from utils.logging import get_logger


class SuppressErrorOptimizer(BaseOptimizer):
    """Logs failures of the inner optimizer instead of raising them.

    A missing or broken tool leaves the file unoptimized; batch jobs keep
    going.
    """

    def __init__(self, optimizer: BaseOptimizer, logger: logging.Logger | None = None):
        self.optimizer = optimizer
        self.logger = logger or get_logger("optimizers")

    def unwrap(self) -> BaseOptimizer:
        return self.optimizer.unwrap()

    async def optimize(self, path: str) -> None:
        try:
            await self.optimizer.optimize(path)
        except (ImgoptError, OSError) as e:
            context = {"path": path, "error_code": getattr(e, "error_code", "io_error")}
            context.update(getattr(e, "details", {}))
            self.logger.error(
                f"Error during image optimization: {e}",
                exc_info=e,
                extra={"context": context},
            )

    def __repr__(self) -> str:
        return f"SuppressErrorOptimizer({self.optimizer!r})"
