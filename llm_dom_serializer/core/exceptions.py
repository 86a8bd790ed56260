"""Custom exceptions for the DOM serialization pipeline."""

from typing import Optional


class DOMSerializerError(Exception):
    """Base exception for all DOM serializer errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        recoverable: bool = True
    ):
        self.message = message
        self.details = details
        self.recoverable = recoverable
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class DOMError(DOMSerializerError):
    """Errors related to DOM tree processing."""
    pass


class DOMStructureError(DOMError):
    """The raw node graph is malformed (cycles, missing identity, wrong shape)."""

    def __init__(
        self,
        message: str,
        node_id: Optional[int] = None,
        **kwargs
    ):
        self.node_id = node_id
        super().__init__(message, recoverable=False, **kwargs)


class SerializationFailed(DOMError):
    """
    Serialization of a snapshot failed unexpectedly.

    The original exception is kept in ``cause`` (and chained as
    ``__cause__``). Callers should retry with a fresh snapshot rather than
    use partial results.
    """

    def __init__(
        self,
        cause: BaseException,
        message: Optional[str] = None,
        **kwargs
    ):
        self.cause = cause
        msg = message or f"DOM serialization failed: {cause}"
        super().__init__(msg, details=type(cause).__name__, recoverable=True, **kwargs)


class StaleIndexError(DOMError):
    """An interactive index is not present in the current selector map."""

    def __init__(self, index: int, **kwargs):
        self.index = index
        super().__init__(
            f"Element with index {index} is not in the current selector map",
            recoverable=True,
            **kwargs
        )


class IframeProcessingError(DOMError):
    """A single iframe could not be expanded."""

    def __init__(
        self,
        target_id: str,
        reason: str,
        **kwargs
    ):
        self.target_id = target_id
        self.reason = reason
        super().__init__(f"Failed to process iframe {target_id}: {reason}", **kwargs)


class ConfigurationError(DOMSerializerError):
    """Invalid configuration values."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, recoverable=False, **kwargs)
