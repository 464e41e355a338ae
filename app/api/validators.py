"""
app/api/validators.py

Purpose: Route guards

- Rejects requests while MongoDB is not connected (500)
- Rejects malformed user ids before any lookup (404)
"""

from bson import ObjectId
from fastapi import Path

from app.core.exceptions import DatabaseUnavailableError, ResourceNotFoundError
from app.core.logging import get_logger
from app.db import mongo

logger = get_logger(__name__)


async def mongo_checker() -> None:
    if not mongo.is_connected():
        logger.error("Issue with mongo connection")
        raise DatabaseUnavailableError("Internal server error")


async def valid_object_id(id: str = Path(..., description="User ObjectId")) -> ObjectId:
    """
    Parses the path id. Malformed ids are answered like missing users.
    """
    if not ObjectId.is_valid(id):
        logger.warning(f"invalid id: {id}")
        raise ResourceNotFoundError()
    return ObjectId(id)
