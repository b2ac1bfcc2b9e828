"""
Record store: the single persistence seam every service goes through.

Services never build queries themselves. They call
``store.execute("<family>.<name>", **params)`` and get back a list of rows;
the named operations live next to this module, one file per record family,
and register themselves with :func:`operation`.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, NamedTuple

from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreError

logger = logging.getLogger(__name__)

_DEPTH_KEY = "greenpoll.atomic_depth"


class _Operation(NamedTuple):
    fn: Callable[..., Any]
    write: bool


OPERATIONS: Dict[str, _Operation] = {}


def operation(name: str, write: bool = False):
    """Register a named store operation. ``fn`` receives the session first."""
    def decorator(fn):
        if name in OPERATIONS:
            raise RuntimeError(f"Store operation registered twice: {name}")
        OPERATIONS[name] = _Operation(fn, write)
        return fn
    return decorator


class RecordStore:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    @property
    def in_atomic(self) -> bool:
        return self.session.info.get(_DEPTH_KEY, 0) > 0

    @contextmanager
    def atomic(self):
        """
        Unit of work. Nested blocks join the outermost one; only the outermost
        commits, and any exception rolls the whole unit back.
        """
        session = self.session
        depth = session.info.get(_DEPTH_KEY, 0)
        session.info[_DEPTH_KEY] = depth + 1
        try:
            yield session
            if depth == 0:
                session.commit()
        except SQLAlchemyError as exc:
            if depth == 0:
                session.rollback()
            logger.exception("Store transaction failed")
            raise StoreError() from exc
        except Exception:
            if depth == 0:
                session.rollback()
            raise
        finally:
            session.info[_DEPTH_KEY] = depth

    def execute(self, name: str, **params) -> List[Any]:
        try:
            op = OPERATIONS[name]
        except KeyError:
            raise LookupError(f"Unknown store operation: {name}") from None

        if op.write:
            with self.atomic() as session:
                rows = op.fn(session, **params)
                session.flush()
            return list(rows or [])

        try:
            return list(op.fn(self.session, **params) or [])
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Store read failed: %s", name)
            raise StoreError() from exc


# Register operations (import order does not matter)
from . import users, sessions, tokens, polls, votes  # noqa: E402,F401
