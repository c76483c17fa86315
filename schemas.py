from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config import settings


class CustomOptimizer(BaseModel):
    """User supplied tool, registered under its key in `custom_optimizers`."""

    command: str
    args: list[str] = Field(default_factory=list)


class OptimizerOptions(BaseModel):
    """Options consumed by OptimizerFactory (all optional with defaults)."""

    model_config = ConfigDict(extra="forbid")

    ignore_errors: bool = True
    execute_only_first_png_optimizer: bool = True
    execute_only_first_jpeg_optimizer: bool = True

    optipng_options: list[str] = Field(default_factory=lambda: ["-i0", "-o2", "-quiet"])
    pngquant_options: list[str] = Field(default_factory=lambda: ["--force", "--skip-if-larger"])
    pngcrush_options: list[str] = Field(default_factory=lambda: ["-reduce", "-q", "-ow"])
    pngout_options: list[str] = Field(default_factory=lambda: ["-s3", "-q", "-y"])
    gifsicle_options: list[str] = Field(default_factory=lambda: ["-b", "-O5"])
    jpegoptim_options: list[str] = Field(
        default_factory=lambda: ["--strip-all", "--all-progressive"]
    )
    jpegtran_options: list[str] = Field(default_factory=lambda: ["-optimize", "-progressive"])
    advpng_options: list[str] = Field(default_factory=lambda: ["-z", "-4", "-q"])
    svgo_options: list[str] = Field(default_factory=list)

    # Explicit executable paths; when unset the tool is looked up on PATH.
    optipng_bin: Optional[str] = None
    pngquant_bin: Optional[str] = None
    pngcrush_bin: Optional[str] = None
    pngout_bin: Optional[str] = None
    gifsicle_bin: Optional[str] = None
    jpegoptim_bin: Optional[str] = None
    jpegtran_bin: Optional[str] = None
    advpng_bin: Optional[str] = None
    svgo_bin: Optional[str] = None

    custom_optimizers: dict[str, CustomOptimizer] = Field(default_factory=dict)
    single_optimizer_timeout_in_seconds: int = Field(default=60, gt=0)
    output_filepath_pattern: str = "%basename%/%filename%%ext%"

    @classmethod
    def from_settings(cls, **overrides) -> "OptimizerOptions":
        """Seed the environment-driven fields from `settings`."""
        values = {
            "ignore_errors": settings.ignore_errors,
            "single_optimizer_timeout_in_seconds": settings.tool_timeout_seconds,
            "output_filepath_pattern": settings.output_filepath_pattern,
        }
        values.update(overrides)
        return cls(**values)


class RunResult(BaseModel):
    """Outcome of one external tool invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    tools: dict[str, bool]
    version: str
