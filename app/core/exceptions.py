from typing import Optional, Any

class BikeShareError(Exception):
    """
    Base exception for the bike rental API.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(BikeShareError):
    """
    Raised when a requested resource is not found, or its id is malformed.
    """
    def __init__(self, message: str = "resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class BadRequestError(BikeShareError):
    """
    Raised for rejected credentials and for store errors other than connectivity.
    """
    def __init__(self, message: str = "bad request", code: str = "BAD_REQUEST", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=400, details=details)

class DatabaseUnavailableError(BikeShareError):
    """
    Raised when MongoDB is unreachable or the client is not connected.
    """
    def __init__(self, message: str = "internal server error", details: Optional[Any] = None):
        super().__init__(message, code="DATABASE_UNAVAILABLE", status_code=500, details=details)
