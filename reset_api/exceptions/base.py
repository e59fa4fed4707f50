"""Root of the application exception hierarchy."""


class AppException(Exception):
    """Base class for all domain errors raised by the service layer."""

    def __init__(self, message: str = "Internal server error"):
        """
        Initialize the exception with a human-readable message.

        Parameters:
            message (str): Message exposed to API clients by the HTTP error handlers.
        """
        self.message = message
        super().__init__(message)
