"""
app/api/users.py

Purpose: User REST endpoints

- Session check, login and registration
- User listing and lookup
- Reviews and profile image updates
- Account deletion with cascading bike removal
"""

from bson import ObjectId
from fastapi import APIRouter, Depends, Request, Response
from motor.motor_asyncio import AsyncIOMotorCollection

from app.api.validators import mongo_checker, valid_object_id
from app.db.mongo import get_bikes_collection, get_users_collection
from app.models.user import serialize_user, to_json
from app.schemas.response import CurrentUserResponse
from app.schemas.user import ImageUpdateRequest, LoginRequest, RegisterRequest, ReviewRequest
from app.services import user_service
from app.services.session_service import get_session_email, start_session

router = APIRouter(prefix="/users")


@router.get("/check-session", response_model=CurrentUserResponse)
async def check_session(request: Request):
    """
    Reports who is logged in on this session; 401 with no body otherwise.
    """
    email = get_session_email(request.session)
    if email is None:
        return Response(status_code=401)
    return {"currentUser": email}


@router.get("", dependencies=[Depends(mongo_checker)])
async def list_users(users: AsyncIOMotorCollection = Depends(get_users_collection)):
    result = await user_service.list_users(users)
    return [serialize_user(user) for user in result]


@router.post("/login", response_model=CurrentUserResponse, dependencies=[Depends(mongo_checker)])
async def login(
    body: LoginRequest,
    request: Request,
    users: AsyncIOMotorCollection = Depends(get_users_collection),
):
    user = await user_service.authenticate(users, body.email, body.password)
    start_session(request.session, user)
    return {"currentUser": str(user["_id"])}


@router.post("", dependencies=[Depends(mongo_checker)])
async def register(
    body: RegisterRequest,
    request: Request,
    users: AsyncIOMotorCollection = Depends(get_users_collection),
):
    """
    Creates an account and logs it in.
    """
    user = await user_service.register_user(users, body.email, body.password, body.name)
    start_session(request.session, user)
    return serialize_user(user)


@router.get("/{id}", dependencies=[Depends(mongo_checker)])
async def get_user(
    user_id: ObjectId = Depends(valid_object_id),
    users: AsyncIOMotorCollection = Depends(get_users_collection),
):
    return serialize_user(await user_service.get_user(users, user_id))


@router.post("/{id}/reviews", dependencies=[Depends(mongo_checker)])
async def add_review(
    body: ReviewRequest,
    user_id: ObjectId = Depends(valid_object_id),
    users: AsyncIOMotorCollection = Depends(get_users_collection),
):
    user = await user_service.add_review(users, user_id, body.rating, body.review)
    return {
        "review": {"rating": body.rating, "review": body.review},
        "user": serialize_user(user),
    }


@router.patch("/{id}/image", dependencies=[Depends(mongo_checker)])
async def update_image(
    body: ImageUpdateRequest,
    user_id: ObjectId = Depends(valid_object_id),
    users: AsyncIOMotorCollection = Depends(get_users_collection),
):
    image = body.model_dump(exclude_unset=True)
    user = await user_service.update_image(users, user_id, image)
    return {"image": image, "user": serialize_user(user)}


@router.delete("/{id}", dependencies=[Depends(mongo_checker)])
async def delete_user(
    user_id: ObjectId = Depends(valid_object_id),
    users: AsyncIOMotorCollection = Depends(get_users_collection),
    bikes: AsyncIOMotorCollection = Depends(get_bikes_collection),
):
    """
    Deletes the user and every bike they own.
    """
    result = await user_service.delete_user(users, bikes, user_id)
    return {
        "user": serialize_user(result["user"]),
        "deletedBikes": [to_json(bike) for bike in result["deletedBikes"]],
    }
