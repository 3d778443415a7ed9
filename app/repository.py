from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import ConstraintViolation, NotFound, StorageError


class UserRepository:
    """Data-access layer for users.

    Every read and write ignores soft-deleted rows. Low-level SQLAlchemy
    errors are rolled back and re-raised as :class:`StorageError` so the
    layers above never deal with driver exceptions.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user: models.User) -> models.User:
        self._session.add(user)
        self._commit()
        self._session.refresh(user)
        return user

    def find_all(self) -> List[models.User]:
        stmt = (
            select(models.User)
            .where(models.User.deleted_at.is_(None))
            .order_by(models.User.id)
        )
        try:
            return list(self._session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError("Failed to load users") from exc

    def find_by_id(self, user_id: int) -> models.User:
        return self._find_one(models.User.id == user_id)

    def find_by_email(self, email: str) -> models.User:
        return self._find_one(models.User.email == email)

    def update(self, user: models.User) -> models.User:
        """Persist the mutable fields of ``user``.

        Raises:
            NotFound: if the row was deleted since it was loaded.
        """
        stmt = (
            update(models.User)
            .where(models.User.id == user.id, models.User.deleted_at.is_(None))
            .values(name=user.name)
        )
        self._execute_one(stmt)
        self._session.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        """Soft delete a user by id.

        Raises:
            NotFound: if the user does not exist or is already deleted.
        """
        stmt = (
            update(models.User)
            .where(models.User.id == user_id, models.User.deleted_at.is_(None))
            .values(deleted_at=datetime.utcnow())
        )
        self._execute_one(stmt)

    def _find_one(self, *criteria) -> models.User:
        stmt = select(models.User).where(models.User.deleted_at.is_(None), *criteria)
        try:
            user = self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to load user") from exc
        if user is None:
            raise NotFound("User not found")
        return user

    def _execute_one(self, stmt) -> None:
        """Run an UPDATE that must touch exactly one live row, then commit."""
        try:
            result = self._session.execute(stmt, execution_options={"synchronize_session": False})
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError("Database update failed") from exc

        if result.rowcount == 0:
            self._session.rollback()
            raise NotFound("User not found")
        self._commit()

    def _commit(self) -> None:
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise ConstraintViolation("Unique constraint violated") from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            # Re-raise a simplified error for the API layer to handle.
            raise StorageError("Database commit failed") from exc
