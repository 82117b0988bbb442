"""Typed failures raised while executing jobs, and their retry classification."""

import httpx


class JobError(Exception):
    """Base class for job execution failures."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(JobError):
    """Job input does not match the shape expected for its type."""


class NetworkTransientError(JobError):
    """Timeout or dropped connection while talking to the provider."""

    retryable = True


class ProviderServerError(JobError):
    """5xx (or 429) response from the completion provider."""

    retryable = True

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ProviderClientError(JobError):
    """4xx response from the completion provider."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class JobTimeoutError(JobError):
    """The job exceeded its wall-clock deadline."""

    def __init__(self, message: str = "Job timeout"):
        super().__init__(message)


class JobNotFoundError(JobError):
    """The job record does not exist (or vanished mid-run)."""


TRANSIENT_MARKERS = ("ECONNRESET", "ETIMEDOUT")


def is_retryable(exc: BaseException) -> bool:
    """Decide whether a failed run may be retried."""
    if isinstance(exc, JobError):
        return exc.retryable
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, (ConnectionResetError, TimeoutError)):
        return True
    message = str(exc)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def error_message(exc: BaseException) -> str:
    """Human-readable message stored on a failed job."""
    if isinstance(exc, JobError):
        return exc.message
    return str(exc) or exc.__class__.__name__
