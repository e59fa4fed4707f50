"""Reset token exceptions."""

from reset_api.exceptions.base import AppException


class InvalidTokenError(AppException):
    """No account carries the presented reset token."""

    def __init__(self, message: str = "Invalid or expired token"):
        """
        Initialize the InvalidTokenError with a descriptive message.

        Parameters:
            message (str): Error message describing the token problem. Defaults to "Invalid or expired token",
                which deliberately does not say whether the token ever existed.
        """
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Token matched an account but its expiry has passed."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)
