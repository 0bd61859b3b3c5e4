# Overview: Read retry on transient database failures, and row locking for read-modify-write.

from __future__ import annotations

import time

from flask import current_app, has_app_context
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def _default_attempts() -> int:
    if has_app_context():
        return int(current_app.config.get("READ_RETRY_ATTEMPTS", 3))
    return 3


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks, dropped connections) and
    StaleDataError (optimistic locking conflicts). attempts defaults to
    READ_RETRY_ATTEMPTS from the app config.
    """
    if attempts is None:
        attempts = _default_attempts()
    attempts = max(1, attempts)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))


def lock_for_update(query):
    """
    Apply row-level locking for read-modify-write sequences.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()
