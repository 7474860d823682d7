"""Read-evaluate-write cycles against a single user row.

A cycle loads the user locked (``with_for_update``), lets the caller mutate
it, and commits. ``User.version_id`` turns a concurrent writer into a
``StaleDataError``; the unique unlock constraint turns a duplicate unlock into
an ``IntegrityError``. Either one rolls back and reruns the whole cycle.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from routely.errors import NotFound, PersistenceError, RoutelyError
from routely.extensions import db
from routely.models import User

T = TypeVar("T")


def lock_user(user_id: int) -> User:
    u = User.query.filter_by(id=int(user_id)).with_for_update().populate_existing().first()
    if not u:
        raise NotFound("User not found")
    return u


def run_in_transaction(user_id: int, fn: Callable[[User], T], *, retries: int | None = None) -> T:
    """Run ``fn(user)`` and commit, retrying the whole cycle on conflict.

    Policy errors raised by ``fn`` roll back and propagate untouched. Storage
    errors become ``PersistenceError`` so callers never report success.
    """
    if retries is None:
        retries = int(current_app.config.get("POINTS_TXN_RETRIES") or 3)
    attempts = max(1, retries)
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            u = lock_user(user_id)
            result = fn(u)
            db.session.commit()
            return result
        except RoutelyError:
            db.session.rollback()
            raise
        except (StaleDataError, IntegrityError) as e:
            db.session.rollback()
            last_error = e
            current_app.logger.warning(
                "user %s changed concurrently (attempt %s/%s): %s", user_id, attempt, attempts, e
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e

    raise PersistenceError() from last_error
