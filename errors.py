"""Error taxonomy shared by the repositories, the upload handler and the routes.

Every error carries a ``message`` that is safe to show to a client. Storage
errors keep the driver detail in ``detail`` for the logs only.
"""


class AppError(Exception):
    message = "Internal server error"
    status_code = 200

    def __init__(self, message: str = None, detail: str = None):
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    message = "Invalid request"


class UnsupportedMediaError(ValidationError):
    message = "Only image files are allowed"


class PayloadTooLargeError(AppError):
    message = "File is too large"


class ConflictError(AppError):
    message = "Resource already exists"


class AuthError(AppError):
    message = "Not authorized"


class NotFoundError(AppError):
    message = "Resource not found"


class DatabaseConnectionError(AppError):
    pass


class QueryError(AppError):
    pass


class IntegrityViolation(QueryError):
    pass


class RequestTimeoutError(AppError):
    message = "Request timed out"
    status_code = 504
