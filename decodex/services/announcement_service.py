import datetime
import logging

from extensions import db
from decodex.errors import NotFound, ValidationError
from decodex.models import Announcement
from decodex.models.announcement import ANNOUNCEMENT_TYPES
from decodex.services import log_service

logger = logging.getLogger(__name__)


def create_announcement(title, message, type="info", duration_seconds=None):
    title = (title or "").strip()
    message = (message or "").strip()
    if not title or not message:
        raise ValidationError("An announcement needs a title and a message")
    type = type or "info"
    if type not in ANNOUNCEMENT_TYPES:
        raise ValidationError(f"Unknown announcement type '{type}'")

    expires_at = None
    if duration_seconds not in (None, "", 0, "0"):
        try:
            seconds = int(duration_seconds)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid duration: {duration_seconds}")
        if seconds < 0:
            raise ValidationError("Duration cannot be negative")
        expires_at = datetime.datetime.utcnow() + datetime.timedelta(seconds=seconds)

    announcement = Announcement(title=title, message=message, type=type, is_active=True, expires_at=expires_at)
    db.session.add(announcement)
    log_service.record("announcements", f"Announcement '{title}' ({type})")
    db.session.commit()
    return announcement


def get_active_announcements(now=None):
    now = now or datetime.datetime.utcnow()
    announcements = Announcement.query.filter_by(is_active=True) \
        .order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()
    return [a for a in announcements if a.is_live(now)]


def deactivate_announcement(announcement_id):
    announcement = db.session.get(Announcement, announcement_id)
    if not announcement:
        raise NotFound(f"Announcement {announcement_id} not found")
    announcement.is_active = False
    log_service.record("announcements", f"Deactivated announcement {announcement_id}")
    db.session.commit()
    return announcement
