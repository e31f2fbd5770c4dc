from fastapi import HTTPException

class AppError(HTTPException):
    """Base for errors surfaced to API callers with a stable machine-readable kind."""
    kind = "internal"
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)

class Unauthenticated(AppError):
    kind = "unauthenticated"
    status_code = 401
    default_detail = "Access token required"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})

class Forbidden(AppError):
    kind = "forbidden"
    status_code = 403
    default_detail = "Access denied"

class NotFound(AppError):
    kind = "not_found"
    status_code = 404
    default_detail = "Resource not found"

class LinkExpired(AppError):
    kind = "expired"
    status_code = 410
    default_detail = "Share link has expired"

class InvalidInput(AppError):
    kind = "invalid_input"
    status_code = 400
    default_detail = "Invalid input"

class Conflict(AppError):
    kind = "conflict"
    status_code = 409
    default_detail = "Resource already exists"

class UpstreamUnavailable(AppError):
    kind = "upstream_unavailable"
    status_code = 503
    default_detail = "Text-completion service unavailable"

class InternalError(AppError):
    kind = "internal"
    status_code = 500
    default_detail = "Internal server error"

# Same message for missing and invisible sets so private sets never leak
SET_NOT_FOUND = "Flashcard set not found"
FLASHCARD_NOT_FOUND = "Flashcard not found"
