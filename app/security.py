from passlib.context import CryptContext


class PasswordHasher:
    """bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

