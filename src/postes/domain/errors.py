from __future__ import annotations


class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    def __init__(self, message: str, campos: dict[str, str] | None = None):
        super().__init__(message)
        self.campos = dict(campos or {})


class NotFoundError(AppError):
    pass


class AuthorizationError(AppError):
    pass


class SessionExpiredError(AuthorizationError):
    pass


class ApiError(AppError):
    """Failure talking to the backend."""


class HttpError(ApiError):
    def __init__(self, status: int, body: str = "", message: str | None = None):
        super().__init__(message or body or f"HTTP {status}")
        self.status = int(status)
        self.body = body


class ApiConnectionError(ApiError):
    pass


class ApiTimeoutError(ApiError):
    pass
