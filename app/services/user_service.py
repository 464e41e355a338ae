"""
app/services/user_service.py

Purpose: User account and resource lifecycle

- Listing, lookup and registration of users
- Credential checks for login
- Reviews with running average rating
- Profile image merge updates
- Cascading deletion of a user's bikes
"""

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from typing import Any, Dict, List, Optional

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging import get_logger
from app.core.security import hash_password, verify_password
from app.db.mongo import store_errors
from app.models.user import NO_RATING, PROTECTED_FIELDS, as_object_id, new_user_document

logger = get_logger(__name__)


def average_rating(old_rating: float, review_count: int, new_rating: float) -> float:
    """
    Folds a new review rating into a running mean.

    Args:
        old_rating: Current mean, or NO_RATING if never reviewed
        review_count: Number of reviews before the new one is appended
        new_rating: Rating carried by the new review

    Returns:
        Mean of all ratings including the new one
    """
    if review_count <= 0 or old_rating == NO_RATING:
        return float(new_rating)
    return (old_rating * review_count + new_rating) / (review_count + 1)


async def list_users(users: AsyncIOMotorCollection) -> List[Dict[str, Any]]:
    with store_errors("list users"):
        return await users.find().to_list(length=None)


async def get_user(users: AsyncIOMotorCollection, user_id: ObjectId) -> Dict[str, Any]:
    """
    Retrieves a user by id.

    Raises:
        ResourceNotFoundError: If no user has this id
    """
    with store_errors("find user"):
        user = await users.find_one({"_id": user_id})
    if not user:
        raise ResourceNotFoundError()
    return user


async def authenticate(users: AsyncIOMotorCollection, email: str, password: str) -> Dict[str, Any]:
    """
    Checks login credentials.

    Returns:
        The matching user document

    Raises:
        BadRequestError: Unknown email or wrong password
    """
    with store_errors("find user by email"):
        user = await users.find_one({"email": email})

    if not user:
        logger.info("Login rejected: unknown email", extra={"email": email})
        raise BadRequestError("Unable to login", code="LOGIN_FAILED")

    if not verify_password(password, user.get("password", "")):
        logger.info("Login rejected: wrong password", extra={"email": email})
        raise BadRequestError("Password is incorrect", code="LOGIN_FAILED")

    return user


async def register_user(users: AsyncIOMotorCollection, email: str, password: str, name: str) -> Dict[str, Any]:
    """
    Creates a new account. The password is hashed here, before it reaches the store.

    Returns:
        The stored user document, including its generated _id

    Raises:
        BadRequestError: Duplicate email or other write error
        DatabaseUnavailableError: MongoDB unreachable
    """
    user = new_user_document(email, hash_password(password), name)

    with store_errors("register user"):
        result = await users.insert_one(user)

    user["_id"] = result.inserted_id
    logger.info("New user registered", extra={"user_id": str(result.inserted_id), "email": email})
    return user


async def add_review(users: AsyncIOMotorCollection, user_id: ObjectId, rating: float, review: str) -> Dict[str, Any]:
    """
    Appends a review and recomputes the user's average rating.

    The read and the write are separate operations, so two reviews
    submitted at the same time can lose one rating update.

    Returns:
        The updated user document
    """
    user = await get_user(users, user_id)

    reviews = list(user.get("reviews", []))
    user["rating"] = average_rating(user.get("rating", NO_RATING), len(reviews), rating)
    reviews.append(review)
    user["reviews"] = reviews

    with store_errors("save review"):
        await users.update_one(
            {"_id": user_id},
            {"$set": {"rating": user["rating"], "reviews": reviews}}
        )

    logger.info(f"Review added, rating now {user['rating']:.2f}", extra={"user_id": str(user_id)})
    return user


async def update_image(users: AsyncIOMotorCollection, user_id: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merges the supplied image fields into the user.

    Returns:
        The user document after the update

    Raises:
        ResourceNotFoundError: If no user has this id
    """
    changes = {key: value for key, value in fields.items() if key not in PROTECTED_FIELDS}

    with store_errors("update user image"):
        if changes:
            user = await users.find_one_and_update(
                {"_id": user_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER
            )
        else:
            user = await users.find_one({"_id": user_id})

    if not user:
        raise ResourceNotFoundError()

    logger.info("Profile image updated", extra={"user_id": str(user_id)})
    return user


async def delete_user(
    users: AsyncIOMotorCollection,
    bikes: AsyncIOMotorCollection,
    user_id: ObjectId,
) -> Dict[str, Any]:
    """
    Deletes a user, then each of their bikes in list order.

    Bikes are deleted one at a time. A failure part way through leaves the
    earlier deletions in place.

    Returns:
        {"user": deleted user, "deletedBikes": one entry per owned bike,
        None where the bike was already gone}
    """
    with store_errors("delete user"):
        user = await users.find_one_and_delete({"_id": user_id})

    if not user:
        raise ResourceNotFoundError()

    deleted_bikes: List[Optional[Dict[str, Any]]] = []
    for bike_id in user.get("bikes", []):
        with store_errors("delete bike"):
            bike = await bikes.find_one_and_delete({"_id": as_object_id(bike_id)})
        if bike is None:
            logger.warning(f"Bike {bike_id} already absent during cascade", extra={"user_id": str(user_id)})
        deleted_bikes.append(bike)

    logger.info(f"User deleted with {len(deleted_bikes)} bike(s)", extra={"user_id": str(user_id)})
    return {"user": user, "deletedBikes": deleted_bikes}
