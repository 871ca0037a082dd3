"""Errors raised by completion clients."""


class CompletionError(Exception):
    """Base class for every failure of a completion request."""


class EmptyInput(CompletionError):
    """The text to complete was blank. Raised before anything is sent."""


class TransportError(CompletionError):
    """The request never got a response (connection refused, DNS, reset...)."""


class UpstreamError(CompletionError):
    """The completion service answered, but not with a usable reply."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
