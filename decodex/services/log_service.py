import logging

from extensions import db
from decodex.models import LogEntry

logger = logging.getLogger(__name__)


def record(source, message):
    """Adds an audit row to the current session; the caller commits it."""
    logger.info("[%s] %s", source, message)
    entry = LogEntry(source=source, message=str(message))
    db.session.add(entry)
    return entry


def recent(limit=200):
    entries = LogEntry.query.order_by(LogEntry.created_at.desc(), LogEntry.id.desc()).limit(limit).all()
    return [e.to_dict() for e in entries]
