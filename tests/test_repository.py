import pytest
from sqlalchemy import select

from app import models
from app.errors import ConstraintViolation, NotFound
from app.repository import UserRepository


@pytest.fixture()
def repo(db_session):
    return UserRepository(db_session)


def _user(name="Ana", email="ana@x.com"):
    return models.User(name=name, email=email, password_hash="not-a-real-hash")


def test_create_assigns_id_and_timestamps(repo):
    user = repo.create(_user())

    assert user.id is not None
    assert user.created_at is not None
    assert user.updated_at is not None
    assert user.deleted_at is None


def test_create_duplicate_email_raises_constraint_violation(repo):
    repo.create(_user())

    with pytest.raises(ConstraintViolation):
        repo.create(_user(name="Copy"))

    # The session is usable again after the rollback.
    assert [u.email for u in repo.find_all()] == ["ana@x.com"]


def test_find_by_email(repo):
    created = repo.create(_user())

    assert repo.find_by_email("ana@x.com").id == created.id
    with pytest.raises(NotFound):
        repo.find_by_email("missing@x.com")


def test_update_persists_name(repo, db_session):
    user = repo.create(_user())
    user.name = "Renamed"

    repo.update(user)

    db_session.expire_all()
    assert repo.find_by_id(user.id).name == "Renamed"


def test_update_of_deleted_row_raises_not_found(repo):
    user = repo.create(_user())
    repo.delete(user.id)
    user.name = "Too late"

    with pytest.raises(NotFound):
        repo.update(user)


def test_delete_is_soft(repo, db_session):
    user = repo.create(_user())

    repo.delete(user.id)

    row = db_session.execute(
        select(models.User).where(models.User.id == user.id)
    ).scalar_one()
    db_session.refresh(row)
    assert row.deleted_at is not None
    with pytest.raises(NotFound):
        repo.find_by_id(user.id)
    with pytest.raises(NotFound):
        repo.find_by_email("ana@x.com")


def test_delete_missing_or_already_deleted_raises_not_found(repo):
    with pytest.raises(NotFound):
        repo.delete(1)

    user = repo.create(_user())
    repo.delete(user.id)
    with pytest.raises(NotFound):
        repo.delete(user.id)


def test_find_all_skips_deleted_and_keeps_insertion_order(repo):
    first = repo.create(_user("First", "first@x.com"))
    second = repo.create(_user("Second", "second@x.com"))
    third = repo.create(_user("Third", "third@x.com"))

    repo.delete(second.id)

    assert [u.id for u in repo.find_all()] == [first.id, third.id]
