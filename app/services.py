import logging
from typing import List

from . import models
from .errors import EmailExists, NotFound, StorageError
from .repository import UserRepository
from .security import PasswordHasher

logger = logging.getLogger(__name__)


class UserService:
    """Business rules for the user lifecycle.

    The email probe in :meth:`create_user` only produces a friendlier error;
    the unique index on ``users.email`` is what actually guarantees
    uniqueness, and a concurrent insert that slips past the probe surfaces
    as :class:`ConstraintViolation` from the repository.
    """

    def __init__(self, repository: UserRepository, hasher: PasswordHasher) -> None:
        self._repo = repository
        self._hasher = hasher

    def create_user(self, name: str, email: str, password: str) -> models.User:
        try:
            self._repo.find_by_email(email)
        except NotFound:
            pass
        else:
            raise EmailExists(email)

        # Never store the password in plain text.
        user = models.User(
            name=name,
            email=email,
            password_hash=self._hasher.hash(password),
        )

        try:
            return self._repo.create(user)
        except StorageError as exc:
            logger.error("Error creating user %s: %s", email, exc)
            raise

    def get_all_users(self) -> List[models.User]:
        return self._repo.find_all()

    def get_user_by_id(self, user_id: int) -> models.User:
        return self._repo.find_by_id(user_id)

    def update_user(self, user_id: int, name: str) -> models.User:
        user = self._repo.find_by_id(user_id)
        user.name = name
        return self._repo.update(user)

    def delete_user(self, user_id: int) -> None:
        self._repo.delete(user_id)
