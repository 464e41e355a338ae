from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class CurrentUserResponse(BaseModel):
    """
    Session identity: the user id after login, the email on session check.
    """
    currentUser: str
