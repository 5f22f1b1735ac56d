from __future__ import annotations


class ChatError(RuntimeError):
    """Base class for errors that map to a fixed HTTP status on /chat."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)


class EmptyMessageError(ChatError):
    status_code = 400


class InvalidRequestError(ChatError):
    status_code = 400


class ForbiddenOriginError(ChatError):
    status_code = 403


class MethodNotAllowedError(ChatError):
    status_code = 405


class RateLimitExceededError(ChatError):
    status_code = 429


class UpstreamError(ChatError):
    """The completion service failed, timed out or returned garbage."""

    status_code = 500
