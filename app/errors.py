"""Error conditions shared by the repository, service and routers."""


class NotFound(Exception):
    """No live (non-deleted) user matches the lookup."""


class EmailExists(Exception):
    """Another live user already holds the email."""


class StorageError(RuntimeError):
    """The database rejected or failed an operation."""


class ConstraintViolation(StorageError):
    """A storage-level constraint (the unique email index) was violated."""
