from pydantic_settings import BaseSettings

VERSION = "0.1.0"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # --- Server ---
    port: int = 8080
    workers: int = 4

    # --- File Limits ---
    max_file_size_mb: int = 32
    max_file_size_bytes: int = 0  # Computed in model_post_init

    # --- Optimization Defaults ---
    tool_timeout_seconds: int = 60
    ignore_errors: bool = True
    output_filepath_pattern: str = "%basename%/%filename%%ext%"

    # --- Logging ---
    log_level: str = "ERROR"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def model_post_init(self, __context) -> None:
        if self.max_file_size_bytes == 0:
            self.max_file_size_bytes = self.max_file_size_mb * 1024 * 1024


settings = Settings()
