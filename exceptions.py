class ImgoptError(Exception):
    """Base exception for all imgopt errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, **kwargs):
        self.message = message
        self.details = kwargs
        super().__init__(message)


class BadRequestError(ImgoptError):
    """Malformed upload, missing file field."""

    status_code = 400
    error_code = "bad_request"


class FileTooLargeError(ImgoptError):
    """File exceeds maximum allowed size."""

    status_code = 413
    error_code = "file_too_large"


class UnrecognizedFormatError(ImgoptError):
    """Type guesser could not classify the file."""

    status_code = 415
    error_code = "unsupported_format"


class UnsupportedTypeError(ImgoptError):
    """File type was recognized but no optimizer is registered for it."""

    status_code = 415
    error_code = "unsupported_type"

    def __init__(self, message: str, type: str, **kwargs):
        self.type = type
        super().__init__(message, type=type, **kwargs)


class OptimizerNotFoundError(ImgoptError):
    """No optimizer registered under the requested name."""

    status_code = 404
    error_code = "optimizer_not_found"

    def __init__(self, message: str, name: str, **kwargs):
        self.name = name
        super().__init__(message, name=name, **kwargs)


class ToolTimeoutError(ImgoptError):
    """Compression tool exceeded timeout."""

    status_code = 500
    error_code = "tool_timeout"


class ProcessError(ImgoptError):
    """Tool exited with a failure status or reported an error."""

    status_code = 500
    error_code = "process_failed"

    def __init__(self, message: str, exit_code: int, stderr: str = "", **kwargs):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message, exit_code=exit_code, **kwargs)


class CommandNotFoundError(ProcessError):
    """Tool executable could not be spawned (exit code 127)."""

    error_code = "command_not_found"


class ExecutionError(ImgoptError):
    """A single-tool optimizer failed. The runner error is kept as `cause`."""

    status_code = 422
    error_code = "optimization_failed"

    def __init__(self, message: str, cause: ImgoptError, **kwargs):
        self.cause = cause
        super().__init__(message, **kwargs)


class ChainExhaustedError(ImgoptError):
    """Every optimizer of a chain failed."""

    status_code = 422
    error_code = "all_optimizers_failed"

    def __init__(self, message: str, errors: list[ImgoptError], **kwargs):
        self.errors = list(errors)
        super().__init__(
            message,
            errors=[e.message for e in self.errors],
            **kwargs,
        )
