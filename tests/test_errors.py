"""Tests for error classification."""

import httpx

from app.services.errors import (
    InputValidationError,
    JobTimeoutError,
    NetworkTransientError,
    ProviderClientError,
    ProviderServerError,
    error_message,
    is_retryable,
)


def test_typed_errors():
    assert is_retryable(NetworkTransientError("socket closed"))
    assert is_retryable(ProviderServerError("Provider error 503", status_code=503))
    assert not is_retryable(ProviderClientError("Provider rejected request 400", status_code=400))
    assert not is_retryable(InputValidationError("Invalid file input"))
    assert not is_retryable(JobTimeoutError())


def test_untyped_transport_errors():
    assert is_retryable(httpx.ReadTimeout("read timed out"))
    assert is_retryable(httpx.ConnectError("refused"))
    assert is_retryable(ConnectionResetError())
    assert is_retryable(RuntimeError("connect ETIMEDOUT 10.0.0.1:443"))
    assert not is_retryable(ValueError("bad value"))


def test_error_message():
    assert JobTimeoutError().message == "Job timeout"
    assert error_message(InputValidationError("Invalid file input")) == "Invalid file input"
    assert error_message(KeyError()) == "KeyError"
