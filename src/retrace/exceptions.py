"""Exception hierarchy for retrace."""


class RetraceError(Exception):
    """Base exception for all retrace errors."""

    pass


class InputError(RetraceError):
    """Errors related to reading the input bitmap."""

    pass


class BitmapLoadError(InputError):
    """Error loading a bitmap file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load bitmap '{path}': {reason}")


class BitmapFormatError(InputError):
    """Unsupported or invalid bitmap format."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid bitmap format '{path}': {details}")


class ConfigError(RetraceError):
    """Invalid tracing or output settings."""

    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"Invalid configuration: {details}")


class OutputError(RetraceError):
    """Errors related to writing the vector output."""

    pass


class OutputWriteError(OutputError):
    """Error writing an SVG file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class ContourProcessingError(RetraceError):
    """Error fitting curves to a single traced contour."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Error processing contour {index}: {reason}")


class EmptyInputWarning(UserWarning):
    """The bitmap has no foreground pixels; the output document is empty."""
