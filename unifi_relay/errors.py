from __future__ import annotations


class RelayError(Exception):
    """Base for failures that map onto a specific HTTP response."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)

    @property
    def error(self) -> str:
        return str(self)


class AuthError(RelayError):
    status_code = 401
    code = "invalid_signature"

    @property
    def error(self) -> str:
        # Never echo details about why a signature was rejected.
        return self.code


class ValidationError(RelayError):
    status_code = 400
    code = "invalid_payload_type"

    @property
    def error(self) -> str:
        return self.code


class PayloadTooLargeError(RelayError):
    status_code = 413
    code = "payload_too_large"

    @property
    def error(self) -> str:
        return self.code


class PersistError(RelayError):
    code = "state_write_failed"


class NotifyError(RelayError):
    code = "notify_failed"

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ConfigError(RuntimeError):
    pass
