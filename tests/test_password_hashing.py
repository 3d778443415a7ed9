from passlib.hash import bcrypt

from app.security import PasswordHasher


def test_hash_is_salted_and_verifiable():
    hasher = PasswordHasher(rounds=4)

    first = hasher.hash("secret123")
    second = hasher.hash("secret123")

    assert first != "secret123"
    assert first != second
    assert bcrypt.verify("secret123", first)
    assert not bcrypt.verify("wrong-password", first)


def test_rounds_are_encoded_in_the_hash():
    assert PasswordHasher(rounds=4).hash("secret123").startswith("$2b$04$")
    assert PasswordHasher(rounds=5).hash("secret123").startswith("$2b$05$")


def test_configured_rounds_reach_the_application(app):
    hashed = app.state.password_hasher.hash("secret123")

    assert app.state.password_hasher.rounds == 4
    assert hashed.startswith("$2b$04$")
