"""Error taxonomy shared by the API and the client core."""


class JobBoardError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(JobBoardError):
    status_code = 400
    code = "validation_error"

    def __init__(self, message: str | None = None, errors: dict[str, str] | None = None):
        super().__init__(message or "Invalid input")
        self.errors = errors or {}


class UploadError(ValidationError):
    code = "upload_error"


class InvalidTransition(ValidationError):
    code = "invalid_transition"


class DuplicateApplication(JobBoardError):
    status_code = 409
    code = "duplicate_application"


class Forbidden(JobBoardError):
    status_code = 403
    code = "forbidden"


class NotFound(JobBoardError):
    status_code = 404
    code = "not_found"


class RateLimited(JobBoardError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str | None = None, retry_after: float | None = None):
        super().__init__(message or "Too many requests")
        self.retry_after = retry_after


class NetworkError(JobBoardError):
    status_code = 503
    code = "network_error"


ERRORS_BY_CODE: dict[str, type[JobBoardError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        UploadError,
        InvalidTransition,
        DuplicateApplication,
        Forbidden,
        NotFound,
        RateLimited,
        NetworkError,
    )
}
