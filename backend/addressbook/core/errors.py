"""
Error taxonomy for the address book service.

Components raise these; the application maps each one to a JSON response of the
form ``{"message": ...}`` with the error's status code. Anything that is not an
``AddressBookError`` is treated as an internal failure.
"""
from typing import Dict, Optional


class AddressBookError(Exception):
    """Base class for errors that have a well-defined HTTP outcome"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AddressBookError):
    """Malformed or missing input fields"""
    status_code = 400
    default_message = "Validation failed"


class Unauthorized(AddressBookError):
    """Missing, invalid or expired credential"""
    status_code = 401
    default_message = "Not authorized"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFound(AddressBookError):
    """Referenced record does not exist (or is owned by someone else)"""
    status_code = 404
    default_message = "Not found"


class Conflict(AddressBookError):
    """Unique constraint would be violated"""
    status_code = 409
    default_message = "Conflict"
