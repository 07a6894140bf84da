class PlantyError(Exception):
    """Base class for errors raised by planty."""


class StorageError(PlantyError):
    """The relational store failed (connection loss, constraint violation, ...)."""


class EmailInUse(PlantyError):
    """Another user already registered this email."""
