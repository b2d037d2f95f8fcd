"""
Team progress storage access.

All state changing work on a team goes through ``team_transaction``: it
serializes requests for the same team inside this process, commits the whole
update at once and rolls back on any failure. The ``version`` column on the
team row catches writers from other processes.
"""
import logging
import threading
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from extensions import db
from decodex.errors import Conflict, DecodexError, NotFound, StorageUnavailable
from decodex.models import Team

logger = logging.getLogger(__name__)

_team_locks = {}
_team_locks_guard = threading.Lock()

# Completion ranks are handed out in arrival order across all teams
completion_lock = threading.Lock()


def _lock_for(team_name):
    with _team_locks_guard:
        lock = _team_locks.get(team_name)
        if lock is None:
            lock = threading.RLock()
            _team_locks[team_name] = lock
        return lock


def _lock_timeout():
    return float(current_app.config.get("TEAM_LOCK_TIMEOUT", 5))


@contextmanager
def acquire(lock, what):
    if not lock.acquire(timeout=_lock_timeout()):
        logger.warning("Timed out waiting for %s", what)
        raise Conflict(f"{what} is busy, try again")
    try:
        yield
    finally:
        lock.release()


def get_team(team_name, refresh=False):
    query = Team.query.populate_existing() if refresh else Team.query
    team = query.filter_by(name=team_name).first()
    if not team:
        logger.info("Unknown team requested: %s", team_name)
        raise NotFound(f"Team '{team_name}' not found")
    return team


def commit():
    """Commit the session, translating storage failures into engine errors."""
    try:
        db.session.commit()
    except StaleDataError as e:
        db.session.rollback()
        logger.warning("Stale team record on commit: %s", e)
        raise Conflict("Team state changed concurrently, try again")
    except OperationalError as e:
        db.session.rollback()
        logger.error("Database unavailable on commit: %s", e)
        raise StorageUnavailable("Database did not answer in time")


@contextmanager
def team_transaction(team_name):
    """Yield the locked team row; commit on success, roll back on error."""
    with acquire(_lock_for(team_name), f"team '{team_name}'"):
        try:
            team = get_team(team_name, refresh=True)
            yield team
            commit()
        except DecodexError:
            db.session.rollback()
            raise
        except OperationalError as e:
            db.session.rollback()
            logger.error("Database unavailable for team %s: %s", team_name, e)
            raise StorageUnavailable("Database did not answer in time")
        except Exception:
            db.session.rollback()
            raise
