import logging

from exceptions import ChainExhaustedError, ImgoptError
from optimizers.base import BaseOptimizer
from utils.logging import get_logger


class ChainOptimizer(BaseOptimizer):
    """Runs a list of optimizers against the same file, in order.

    execute_first=True: stop at the first optimizer that succeeds.
    execute_first=False: run all of them.

    Failures are logged as they happen. The chain itself only fails
    (ChainExhaustedError, one sub-error per member in member order)
    when every member failed.
    """

    def __init__(
        self,
        optimizers: list[BaseOptimizer],
        execute_first: bool,
        logger: logging.Logger | None = None,
    ):
        if not optimizers:
            raise ValueError("ChainOptimizer needs at least one optimizer")
        self.optimizers = tuple(optimizers)
        self.execute_first = execute_first
        self.logger = logger or get_logger("optimizers")

    async def optimize(self, path: str) -> None:
        errors: list[ImgoptError] = []

        for optimizer in self.optimizers:
            try:
                await optimizer.optimize(path)
            except ImgoptError as e:
                self.logger.error(
                    f"Error during image optimization: {e.message}",
                    exc_info=e,
                    extra={"context": {"path": path, "optimizer": repr(optimizer)}},
                )
                errors.append(e)
                continue

            if self.execute_first:
                return

        if len(errors) == len(self.optimizers):
            raise ChainExhaustedError(
                f"All optimizers failed to optimize the file: {path}",
                errors=errors,
                path=path,
            )

    def __repr__(self) -> str:
        return f"ChainOptimizer({list(self.optimizers)!r}, execute_first={self.execute_first})"
