"""Custom exceptions for the analysis pipeline"""


class AuditError(Exception):
    """Base exception for the analysis pipeline"""

    pass


class ConfigError(AuditError):
    """config.json is unreadable or incomplete"""

    pass


class ValidationError(AuditError):
    """Input rejected before any job is created"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class JobNotFound(AuditError):
    """No job with the given id"""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"No analysis found with ID: {job_id}")


class InvalidTransition(AuditError):
    """Requested status change is not part of the job lifecycle"""

    def __init__(self, job_id: str, current: str, requested: str):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Job {job_id} cannot move from '{current}' to '{requested}'"
        )


class NavigationError(AuditError):
    """Page could not be loaded (browser start, DNS, timeout, non-2xx)"""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        msg = f"Failed to load URL '{url}': {reason}"
        if status_code is not None:
            msg += f" (status {status_code})"
        super().__init__(msg)


class RenderError(AuditError):
    """Required selector never appeared on the page"""

    def __init__(self, url: str, selector: str, timeout_ms: int | None = None):
        self.url = url
        self.selector = selector
        self.timeout_ms = timeout_ms
        msg = f"Selector '{selector}' never appeared on '{url}'"
        if timeout_ms:
            msg += f" within {timeout_ms}ms"
        super().__init__(msg)


class PersistenceError(AuditError):
    """Job store could not be read or written"""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class JobCancelled(AuditError):
    """Raised at a pipeline checkpoint once the job has been cancelled"""

    def __init__(self, job_id: str | None = None):
        self.job_id = job_id
        super().__init__(f"Job {job_id or '<unknown>'} was cancelled")
