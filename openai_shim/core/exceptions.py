"""Core exceptions for the shim."""


class ShimError(Exception):
    """Base exception for shim errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ShimError):
    """Raised when there's an issue with the configuration."""
    pass


class InvalidRequestError(ShimError):
    """Raised when an incoming chat request fails structural validation."""

    def __init__(self, message: str, param: str | None = None) -> None:
        super().__init__(message)
        self.param = param


class BackendUnavailableError(ShimError):
    """Raised when the native backend cannot be reached."""
    pass


class ClientDisconnectedError(ShimError):
    """Raised when writing to an output channel that has already been closed."""

    def __init__(self, message: str = "output channel is closed") -> None:
        super().__init__(message)
