"""Errors raised by completion providers"""

from typing import Any


class ProviderError(Exception):
    """Base exception for completion provider failures"""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class QuotaExceeded(ProviderError):
    """Provider refused the request because of quota or rate limits"""

    def __init__(self, retry_after: float | None = None, cause: Exception | None = None):
        self.retry_after = retry_after
        msg = "Provider quota exceeded"
        if retry_after:
            msg += f" (retry after: {retry_after}s)"
        super().__init__(msg, cause)


class ProviderTimeout(ProviderError):
    """Provider did not answer in time"""

    def __init__(self, timeout: float | None = None, cause: Exception | None = None):
        self.timeout = timeout
        msg = "Provider request timed out"
        if timeout:
            msg += f" after {timeout}s"
        super().__init__(msg, cause)


class SafetyBlocked(ProviderError):
    """Completion was withheld by the provider's content filter"""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        msg = "Completion blocked by provider safety filter"
        if reason:
            msg += f" (reason: {reason})"
        super().__init__(msg)


class EmptyCompletion(ProviderError):
    """Provider returned no text"""

    def __init__(self, response: Any = None):
        self.response = response
        super().__init__("Model returned empty response")
