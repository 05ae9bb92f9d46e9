"""Custom exceptions for the system."""

class ConfigError(Exception):
    """Raised when there is a configuration error."""
    pass


class SampleError(Exception):
    """Base exception for a failed sampling attempt.

    Every failure of a single tick is one of the subclasses below, so the
    monitor can catch this class and know the failure is transient.
    """
    kind = "sample"

    def __init__(self, message: str, command: str = None):
        super().__init__(message)
        self.command = command

    def __str__(self) -> str:
        message = super().__str__()
        if self.command:
            return f"{message} (command: {self.command})"
        return message


class ProbeIOError(SampleError):
    """Exception raised when a probe command could not be run.

    This includes missing executables, permission problems and failures
    while reading the child's output.
    """
    kind = "io"


class ProbeDecodeError(SampleError):
    """Exception raised when probe output is not valid UTF-8 text."""
    kind = "decode"


class ProbeParseError(SampleError):
    """Exception raised when probe output is not a valid unsigned integer."""
    kind = "parse"

    def __init__(self, message: str, text: str, command: str = None):
        super().__init__(message, command)
        self.text = text
