class AppError(Exception):
    """Base class for all application exceptions."""
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationFailure(AppError):
    """Raised when a generation request (batch scope) is malformed."""
    code = "VALIDATION_FAILED"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class NotFoundFailure(AppError):
    """Raised when the data a run needs does not exist for the requested scope."""
    code = "NOT_FOUND"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=404, details=details)


class CapacityFailure(AppError):
    """Raised before the search when a class demands more weekly credits than the cap."""
    code = "CAPACITY_EXCEEDED"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class SchedulingInfeasible(AppError):
    """Raised when the search cannot produce a complete timetable."""
    code = "SCHEDULING_INFEASIBLE"

    def __init__(self, message: str, suggestions: list[str] | None = None, details: dict = None):
        self.suggestions = list(suggestions or [])
        merged = dict(details or {})
        merged["suggestions"] = self.suggestions
        super().__init__(message, status_code=400, details=merged)


class PersistenceFailure(AppError):
    """Raised when writing the generated timetable fails; the run is rolled back."""
    code = "PERSISTENCE_FAILED"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)
