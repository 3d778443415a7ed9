import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..errors import ConstraintViolation, EmailExists, NotFound, StorageError
from ..repository import UserRepository
from ..services import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

# Ids are unsigned 32-bit integers.
MAX_USER_ID = 2**32 - 1

_NOT_FOUND = {404: {"model": schemas.ErrorResponse}}


def parse_user_id(
    user_id: Annotated[str, Path(pattern=r"^[0-9]+$", description="User id")],
) -> int:
    """Plain unsigned decimal only; ``+5`` or ``1_0`` are rejected."""
    value = int(user_id)
    if value > MAX_USER_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user ID")
    return value


UserId = Annotated[int, Depends(parse_user_id)]


def get_user_service(request: Request, db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db), request.app.state.password_hasher)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


def _internal_error(action: str, exc: Exception) -> HTTPException:
    logger.error("Storage failure while trying to %s: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.post(
    "",
    response_model=schemas.UserOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": schemas.ErrorResponse}},
)
def create_user(user_in: schemas.UserCreate, service: UserService = Depends(get_user_service)):
    """Create a new user.

    Returns 409 both when the email probe finds an existing user and when
    the unique index rejects a concurrent insert.
    """
    try:
        return service.create_user(user_in.name, user_in.email, user_in.password)
    except (EmailExists, ConstraintViolation):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
    except StorageError as exc:
        raise _internal_error("create user", exc)


@router.get("", response_model=List[schemas.UserOut])
def list_users(service: UserService = Depends(get_user_service)):
    """Return all users that are not deleted."""
    try:
        return service.get_all_users()
    except StorageError as exc:
        raise _internal_error("retrieve users", exc)


@router.get("/{user_id}", response_model=schemas.UserOut, responses=_NOT_FOUND)
def get_user(user_id: UserId, service: UserService = Depends(get_user_service)):
    try:
        return service.get_user_by_id(user_id)
    except NotFound:
        raise _not_found()
    except StorageError as exc:
        raise _internal_error("retrieve user", exc)


@router.put("/{user_id}", response_model=schemas.UserOut, responses=_NOT_FOUND)
def update_user(
    user_in: schemas.UserUpdate,
    user_id: UserId,
    service: UserService = Depends(get_user_service),
):
    try:
        return service.update_user(user_id, user_in.name)
    except NotFound:
        raise _not_found()
    except StorageError as exc:
        raise _internal_error("update user", exc)


@router.delete("/{user_id}", response_model=schemas.MessageOut, responses=_NOT_FOUND)
def delete_user(user_id: UserId, service: UserService = Depends(get_user_service)):
    """Soft delete a user.

    Returns 200 with a confirmation message, 404 if the user does not exist
    or was already deleted.
    """
    try:
        service.delete_user(user_id)
    except NotFound:
        raise _not_found()
    except StorageError as exc:
        raise _internal_error("delete user", exc)

    return {"message": "User deleted successfully"}
