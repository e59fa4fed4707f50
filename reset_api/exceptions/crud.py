"""Request and persistence exceptions."""

from reset_api.exceptions.base import AppException


class NotFoundError(AppException):
    """Resource not found in the database."""

    def __init__(self, resource: str, identifier: int | str, message: str | None = None):
        """
        Initialize a NotFoundError for a missing resource.

        Parameters:
            resource (str): The type or name of the resource that was not found.
            identifier (int | str): The identifier used for the lookup. Kept for logging, never sent to clients.
            message (str | None): Client-facing message; defaults to "<resource> not found".
        """
        self.resource = resource
        self.identifier = identifier
        super().__init__(message or f"{resource} not found")


class ValidationInputError(AppException):
    """Request body is missing a field or carries a malformed value."""

    def __init__(self, message: str, field: str | None = None):
        """
        Create a ValidationInputError for a malformed request.

        Parameters:
            message (str): Human-readable error message describing the validation failure.
            field (str | None): Optional name of the offending field.
        """
        self.field = field
        super().__init__(message)


class PersistenceError(AppException):
    """A datastore write did not complete."""

    def __init__(self, message: str = "Failed to update account"):
        super().__init__(message)
