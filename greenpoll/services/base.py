from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from ..errors import StoreError, ValidationError


class BaseService:
    """Every service reaches its peers and the store through ``services``."""

    def __init__(self, services):
        self.services = services

    @property
    def store(self):
        return self.services.store

    @property
    def config(self):
        return self.services.config

    def _first(self, operation: str, **params):
        rows = self.store.execute(operation, **params)
        return rows[0] if rows else None


def check_length(label: str, value: str, minimum: int, maximum: int, field: str) -> None:
    if minimum == 0:
        if len(value) > maximum:
            raise ValidationError(f"{label} must be no more than {maximum} characters", field=field)
    elif len(value) < minimum or len(value) > maximum:
        raise ValidationError(f"{label} must be between {minimum} and {maximum} characters", field=field)


@contextmanager
def conflict_as(error: Exception):
    """Report a store constraint violation as ``error`` instead of a StoreError."""
    try:
        yield
    except StoreError as exc:
        if isinstance(exc.__cause__, IntegrityError):
            raise error from exc
        raise
