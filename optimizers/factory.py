import logging
import shutil
from types import MappingProxyType
from typing import Callable, Optional

from exceptions import OptimizerNotFoundError
from optimizers.base import BaseOptimizer
from optimizers.chain import ChainOptimizer
from optimizers.changed_output import ChangedOutputOptimizer
from optimizers.command import ArgStrategy, Command, CommandOptimizer
from optimizers.smart import SmartOptimizer
from optimizers.suppress_error import SuppressErrorOptimizer
from schemas import OptimizerOptions
from utils.format_detect import ImageFormat, guess_type
from utils.logging import get_logger

OPTIMIZER_SMART = "smart"


class OptimizerFactory:
    """Builds the name -> optimizer registry from options.

    Every registered entry is a base optimizer wrapped in
    ChangedOutputOptimizer and, when ignore_errors is set, additionally in
    SuppressErrorOptimizer. Chains and the smart dispatcher are composed
    from the unwrapped members so a failing member reaches the chain
    instead of being swallowed.

    The registry is fully built in __init__ and read-only afterwards.
    """

    def __init__(
        self,
        options: Optional[OptimizerOptions] = None,
        logger: Optional[logging.Logger] = None,
        executable_finder: Callable[[str], Optional[str]] = shutil.which,
        type_guesser: Callable[[str], ImageFormat] = guess_type,
    ):
        self.options = options or OptimizerOptions()
        self.logger = logger or get_logger("optimizers")
        self.executable_finder = executable_finder
        self.type_guesser = type_guesser

        self._optimizers: dict[str, BaseOptimizer] = {}
        self._set_up_optimizers()
        self.optimizers = MappingProxyType(self._optimizers)

    def _set_up_optimizers(self) -> None:
        opts = self.options
        reg = self._optimizers

        reg["optipng"] = self._wrap(self._command_optimizer("optipng", opts.optipng_options))
        reg["pngquant"] = self._wrap(
            self._command_optimizer(
                "pngquant", opts.pngquant_options, strategy=ArgStrategy.EXTENSION
            )
        )
        reg["pngcrush"] = self._wrap(self._command_optimizer("pngcrush", opts.pngcrush_options))
        reg["pngout"] = self._wrap(self._command_optimizer("pngout", opts.pngout_options))
        reg["advpng"] = self._wrap(self._command_optimizer("advpng", opts.advpng_options))
        reg["png"] = self._wrap(
            ChainOptimizer(
                [
                    reg["pngquant"].unwrap(),
                    reg["optipng"].unwrap(),
                    reg["pngcrush"].unwrap(),
                    reg["advpng"].unwrap(),
                ],
                opts.execute_only_first_png_optimizer,
                self.logger,
            )
        )

        reg["gif"] = reg["gifsicle"] = self._wrap(
            self._command_optimizer("gifsicle", opts.gifsicle_options)
        )

        reg["jpegoptim"] = self._wrap(
            self._command_optimizer("jpegoptim", opts.jpegoptim_options)
        )
        reg["jpegtran"] = self._wrap(
            self._command_optimizer(
                "jpegtran",
                opts.jpegtran_options,
                strategy=ArgStrategy.OUTPUT_FLAG,
                output_flag="-outfile",
            )
        )
        reg["jpeg"] = reg["jpg"] = self._wrap(
            ChainOptimizer(
                [reg["jpegtran"].unwrap(), reg["jpegoptim"].unwrap()],
                opts.execute_only_first_jpeg_optimizer,
                self.logger,
            )
        )

        reg["svg"] = reg["svgo"] = self._wrap(
            self._command_optimizer(
                "svgo",
                opts.svgo_options,
                strategy=ArgStrategy.OUTPUT_FLAG,
                output_flag="--output",
            )
        )

        for name, custom in opts.custom_optimizers.items():
            reg[name] = self._wrap(self._command_optimizer(custom.command, custom.args))

        reg[OPTIMIZER_SMART] = self._wrap(
            SmartOptimizer(
                {
                    ImageFormat.GIF: reg["gif"].unwrap(),
                    ImageFormat.PNG: reg["png"].unwrap(),
                    ImageFormat.JPEG: reg["jpeg"].unwrap(),
                    ImageFormat.SVG: reg["svg"].unwrap(),
                },
                type_guesser=self.type_guesser,
            )
        )

    def _command_optimizer(
        self,
        name: str,
        args: list[str],
        strategy: ArgStrategy = ArgStrategy.NONE,
        output_flag: str | None = None,
    ) -> CommandOptimizer:
        command = Command(
            executable=self._executable(name),
            args=tuple(args),
            timeout=self.options.single_optimizer_timeout_in_seconds,
        )
        return CommandOptimizer(command, strategy, output_flag)

    def _wrap(self, optimizer: BaseOptimizer) -> BaseOptimizer:
        wrapped = ChangedOutputOptimizer(self.options.output_filepath_pattern, optimizer)
        if self.options.ignore_errors:
            return SuppressErrorOptimizer(wrapped, self.logger)
        return wrapped

    def _executable(self, name: str) -> str:
        """Explicit <name>_bin option, else PATH lookup, else the bare name."""
        explicit = getattr(self.options, f"{name}_bin", None)
        if explicit:
            return explicit
        return self.executable_finder(name) or name

    def get(self, name: str = OPTIMIZER_SMART) -> BaseOptimizer:
        """Return the optimizer registered under `name`.

        Raises:
            OptimizerNotFoundError: If no optimizer has that name.
        """
        try:
            return self.optimizers[name]
        except KeyError:
            raise OptimizerNotFoundError(f'Optimizer "{name}" not found', name=name) from None

    def check_optimizers(self) -> dict[str, bool]:
        """Map every tool executable used by the registry to whether it is installed.

        Keys are tool names, or the full executable path when another
        executable with the same name is already reported.
        """
        executables: dict[str, str] = {}
        for optimizer in self.optimizers.values():
            for command in _commands(optimizer.unwrap()):
                key = command.name
                # Two different executables sharing a basename are reported by path
                if executables.get(key, command.executable) != command.executable:
                    key = command.executable
                executables.setdefault(key, command.executable)

        return {
            name: self.executable_finder(executable) is not None
            for name, executable in executables.items()
        }


def _commands(optimizer: BaseOptimizer) -> list[Command]:
    if isinstance(optimizer, CommandOptimizer):
        return [optimizer.command]
    if isinstance(optimizer, ChainOptimizer):
        return [c for member in optimizer.optimizers for c in _commands(member)]
    if isinstance(optimizer, SmartOptimizer):
        return [c for member in optimizer.optimizers.values() for c in _commands(member)]
    return []
