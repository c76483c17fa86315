from abc import ABC, abstractmethod


class BaseOptimizer(ABC):
    """Abstract base for every optimizer variant."""

    @abstractmethod
    async def optimize(self, path: str) -> None:
        """Optimize the file at `path` in place.

        On success the file may have been replaced by a smaller,
        equivalent one. Failures are raised as ImgoptError subclasses.
        """

    def unwrap(self) -> "BaseOptimizer":
        """Return the innermost undecorated optimizer (self for non-decorators)."""
        return self
