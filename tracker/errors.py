from __future__ import annotations


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, detail=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class ValidationError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class SessionExpiredError(AuthenticationError):
    pass


class NotFoundError(ApiError):
    pass


class ServerError(ApiError):
    pass


class NetworkError(ApiError):
    pass


def error_message(detail, default: str = "Request failed") -> str:
    if isinstance(detail, dict):
        for key in ("message", "error", "detail"):
            value = detail.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
        return default
    if detail:
        return str(detail)
    return default


def error_for_status(status_code: int, detail) -> ApiError:
    message = error_message(detail, f"API error {status_code}")
    if status_code in (400, 422):
        return ValidationError(message, status_code, detail)
    if status_code in (401, 403):
        return AuthenticationError(message, status_code, detail)
    if status_code == 404:
        return NotFoundError(message, status_code, detail)
    if status_code >= 500:
        return ServerError(message, status_code, detail)
    return ApiError(message, status_code, detail)
