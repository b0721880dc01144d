"""Custom exceptions for the SellLocal API."""


class SellLocalError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        return rv


class BusinessLogicError(SellLocalError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class RequestValidationError(BusinessLogicError):
    """Raised when a request body fails schema validation."""
    def __init__(self, errors, message="Validation failed"):
        super().__init__(message, 400, {'errors': errors})
        self.errors = errors


class NotFoundError(SellLocalError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class AuthenticationError(SellLocalError):
    """Raised when the caller could not be authenticated."""
    def __init__(self, message="Not authorized", payload=None):
        super().__init__(message, 401, payload)


class UnauthorizedError(SellLocalError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access", payload=None):
        super().__init__(message, 403, payload)
