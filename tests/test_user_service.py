import asyncio

import pytest
from bson import ObjectId
from pymongo.errors import NetworkTimeout

from app.core.exceptions import BadRequestError, DatabaseUnavailableError, ResourceNotFoundError
from app.models.user import NO_RATING, serialize_user
from app.services import user_service
from app.services.user_service import average_rating
from app.services.session_service import get_session_email, start_session


def run(coro):
    return asyncio.run(coro)


def test_first_review_replaces_sentinel():
    assert average_rating(NO_RATING, 0, 4) == 4


def test_sentinel_ignored_even_with_stale_count():
    assert average_rating(NO_RATING, 3, 5) == 5


def test_running_mean_uses_count_before_append():
    assert average_rating(4, 1, 2) == 3
    assert average_rating(3, 2, 5) == pytest.approx(11 / 3)


def test_register_hashes_password(users_collection):
    user = run(user_service.register_user(users_collection, "r@b.com", "secret1", "Rae"))
    assert user["password"] != "secret1"
    assert user["password"].startswith("$2")
    assert user["rating"] == NO_RATING
    assert users_collection.docs[0]["_id"] == user["_id"]


def test_authenticate(users_collection):
    run(user_service.register_user(users_collection, "r@b.com", "secret1", "Rae"))

    user = run(user_service.authenticate(users_collection, "r@b.com", "secret1"))
    assert user["name"] == "Rae"

    with pytest.raises(BadRequestError, match="Password is incorrect"):
        run(user_service.authenticate(users_collection, "r@b.com", "nope!!"))
    with pytest.raises(BadRequestError, match="Unable to login"):
        run(user_service.authenticate(users_collection, "x@b.com", "secret1"))


def test_get_user_missing(users_collection):
    with pytest.raises(ResourceNotFoundError):
        run(user_service.get_user(users_collection, ObjectId()))


def test_delete_attempts_every_bike_in_order(users_collection, bikes_collection):
    bike_ids = [ObjectId() for _ in range(4)]
    bikes_collection.docs = [{"_id": bike_id} for bike_id in bike_ids]
    user_id = ObjectId()
    # string references are coerced to ObjectId
    users_collection.docs = [{"_id": user_id, "email": "d@b.com", "bikes": [str(b) for b in bike_ids]}]

    result = run(user_service.delete_user(users_collection, bikes_collection, user_id))

    assert len(result["deletedBikes"]) == 4
    assert [call[1]["_id"] for call in bikes_collection.calls] == bike_ids


def test_delete_keeps_earlier_bike_deletions_on_failure(users_collection, bikes_collection):
    bike_ids = [ObjectId(), ObjectId()]
    bikes_collection.docs = [{"_id": bike_id} for bike_id in bike_ids]
    user_id = ObjectId()
    users_collection.docs = [{"_id": user_id, "email": "d@b.com", "bikes": bike_ids}]

    original = bikes_collection.find_one_and_delete
    attempts = []

    async def flaky_delete(query):
        attempts.append(query["_id"])
        if len(attempts) == 2:
            raise NetworkTimeout("timed out")
        return await original(query)

    bikes_collection.find_one_and_delete = flaky_delete

    with pytest.raises(DatabaseUnavailableError):
        run(user_service.delete_user(users_collection, bikes_collection, user_id))

    assert users_collection.docs == []
    assert bikes_collection.docs == [{"_id": bike_ids[1]}]


def test_update_image_without_fields_returns_user(users_collection):
    user_id = ObjectId()
    users_collection.docs = [{"_id": user_id, "email": "i@b.com", "password": "x"}]

    user = run(user_service.update_image(users_collection, user_id, {"password": "y"}))

    assert user["password"] == "x"
    assert [call[0] for call in users_collection.calls] == ["find_one"]


def test_serialize_user_hides_password_and_stringifies_ids():
    user_id, bike_id = ObjectId(), ObjectId()
    rendered = serialize_user({"_id": user_id, "password": "digest", "bikes": [bike_id]})
    assert rendered == {"_id": str(user_id), "bikes": [str(bike_id)]}


def test_session_binding():
    session = {}
    assert get_session_email(session) is None

    user_id = ObjectId()
    start_session(session, {"_id": user_id, "email": "s@b.com"})
    assert session == {"user": str(user_id), "email": "s@b.com"}
    assert get_session_email(session) == "s@b.com"
