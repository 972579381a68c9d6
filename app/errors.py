# app/errors.py
"""
Domain error taxonomy.
Services raise these; app.main maps them to HTTP responses in one place,
so service code never imports FastAPI.
"""


class DomainError(Exception):
    status_code = 400
    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"detail": self.message, "error_code": self.error_code}


class BadRequestError(DomainError):
    status_code = 400
    error_code = "BAD_REQUEST"


class UnauthorizedError(DomainError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(DomainError):
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(DomainError):
    status_code = 409
    error_code = "CONFLICT"
