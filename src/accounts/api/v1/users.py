"""
Users endpoints.

Handlers are plain `def` functions: the validator and the repository are
synchronous, so FastAPI runs them in its threadpool.
"""

import logging

from fastapi import APIRouter, Depends

from accounts.api.responses import EmptyJsonResponse, JsonResponse
from accounts.core.dependencies import (
    get_password_hasher,
    get_payload,
    get_user_repository,
    get_user_validator,
    require_access_token,
)
from accounts.core.request import PayloadRequest
from accounts.core.security import PasswordHasher
from accounts.exceptions import Unauthenticated
from accounts.repositories.user_repository import UserRepository
from accounts.validators.user_validator import UserValidator, coerce_gender

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["users"])

# Request fields that map 1:1 onto User columns on update
_PROFILE_FIELDS = ("email", "name", "dob", "phone")


@router.post("/auth/check")
def check_credentials(
    payload: PayloadRequest = Depends(get_payload),
    validator: UserValidator = Depends(get_user_validator),
    repository: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    validator.validate_auth_request(payload)

    user = repository.get_by_email(payload.get("email"))
    if user is None or not hasher.verify(payload.get("password"), user.password_hash):
        raise Unauthenticated("Wrong email or password!")

    return EmptyJsonResponse()


@router.post("/users", status_code=201)
def create_user(
    payload: PayloadRequest = Depends(get_payload),
    validator: UserValidator = Depends(get_user_validator),
    repository: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    validator.validate_user_input(payload)

    user = repository.create_user(
        email=payload.get("email"),
        name=payload.get("name"),
        password_hash=hasher.hash(payload.get("password")),
        gender=coerce_gender(payload.get("gender")),
        dob=payload.get("dob"),
        phone=payload.get("phone") if payload.has("phone") else None,
    )
    logger.info("Created user %s", user.id)

    return JsonResponse({"id": user.id}, status_code=201)


@router.patch("/users/{user_id}")
def update_user(
    user_id: int,
    _token: str = Depends(require_access_token),
    payload: PayloadRequest = Depends(get_payload),
    validator: UserValidator = Depends(get_user_validator),
    repository: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    repository.get_by_id_or_raise(user_id)

    validator.validate_optional_user_input(payload, current_user_id=user_id)

    changes = payload.only(*_PROFILE_FIELDS)
    if payload.has("gender"):
        changes["gender"] = coerce_gender(payload.get("gender"))
    if payload.has("password"):
        changes["password_hash"] = hasher.hash(payload.get("password"))

    if changes:
        repository.update_user(user_id, **changes)

    return EmptyJsonResponse()
