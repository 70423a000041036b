class AppError(Exception):
    """Base class for all application exceptions.

    Every subclass carries the HTTP status it maps to; the handler in
    ``app.main`` renders it as ``{"error": message}``.
    """

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class AvailabilityViolation(AppError):
    """Proposed schedule falls outside the faculty's declared hours."""

    def __init__(self, message: str, day: str | None = None):
        super().__init__(message, status_code=400, details={"day": day} if day else None)
        self.day = day


class SchedulingConflict(AppError):
    """Proposed schedule overlaps another commitment of the same faculty."""

    def __init__(self, message: str, batch_name: str | None = None):
        super().__init__(message, status_code=409, details={"batch": batch_name} if batch_name else None)
        self.batch_name = batch_name


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str | None = None):
        details = {"id": resource_id} if resource_id else None
        super().__init__(f"{resource_type} not found.", status_code=404, details=details)


class IntegrityViolation(AppError):
    """Unique or referential constraint failure surfaced from the store."""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(message, status_code=status_code)


class UnexpectedError(AppError):
    """Anything else. The message is generic; details go to the server log."""

    def __init__(self, message: str = "An unexpected error occurred."):
        super().__init__(message, status_code=500)
