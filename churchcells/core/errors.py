# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain error taxonomy shared by services, controllers and the HTTP client.

Controllers translate these to status codes; nothing here knows about HTTP.
"""


class HierarchyError(Exception):
    """Base class for every error this service raises on purpose."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(HierarchyError, ValueError):
    """A required field is missing/blank or a reference does not resolve."""


class NotFoundError(HierarchyError, KeyError):
    """An id does not resolve to a stored row."""


class NetworkError(HierarchyError):
    """Request failed, timed out, or the server answered with an unexpected error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
