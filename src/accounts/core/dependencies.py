from fastapi import Depends, Request
from sqlalchemy.orm import Session

from accounts.core.request import PayloadRequest
from accounts.core.security import PasswordHasher
from accounts.database.session import get_session
from accounts.exceptions import Unauthenticated
from accounts.repositories.user_repository import UserRepository
from accounts.validators.user_validator import UserValidator

ACCESS_TOKEN_FIELD = "access_token"


def get_user_repository(db: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(db)


def get_user_validator(repository: UserRepository = Depends(get_user_repository)) -> UserValidator:
    return UserValidator(repository)


def get_password_hasher(request: Request) -> PasswordHasher:
    # built once per app in create_app()
    return request.app.state.password_hasher


async def get_payload(request: Request) -> PayloadRequest:
    return await PayloadRequest.from_starlette(request)


def require_access_token(request: Request) -> str:
    """
    Require an `access_token` header or query parameter.

    Only presence is checked here; verifying the token belongs to whoever
    issues it.
    """
    token = request.headers.get(ACCESS_TOKEN_FIELD) or request.query_params.get(ACCESS_TOKEN_FIELD)
    if not token:
        raise Unauthenticated()
    return token
