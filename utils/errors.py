from typing import Optional


class AppError(Exception):
    """Base for errors the API maps straight onto a JSON envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class DuplicateEmail(AppError):
    status_code = 400

    def __init__(self, message: str = "Admin already exists with this email"):
        super().__init__(message)


class InvalidCredentials(AppError):
    # same message for unknown email and wrong password
    status_code = 401

    def __init__(self):
        super().__init__("Invalid credentials")


class Unauthorized(AppError):
    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class InvalidArgument(AppError):
    status_code = 400
