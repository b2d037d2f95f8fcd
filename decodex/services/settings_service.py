from extensions import db
from decodex.errors import NotReady
from decodex.models import GameSettings
from decodex.services import log_service


def get_settings():
    """Returns the singleton settings row, creating it on first use."""
    settings = GameSettings.query.order_by(GameSettings.id).first()
    if not settings:
        settings = GameSettings(quiz_active=False, quiz_paused=False)
        db.session.add(settings)
        db.session.commit()
    return settings


def game_status(settings=None):
    settings = settings or get_settings()
    if not settings.quiz_active:
        return "not_started"
    if settings.quiz_paused:
        return "paused"
    return "running"


def ensure_running(settings=None):
    """Raises NotReady unless questions may be served and answered."""
    status = game_status(settings)
    if status == "not_started":
        raise NotReady("The quiz has not started yet")
    if status == "paused":
        raise NotReady("The quiz is paused")


def set_quiz_active(active):
    settings = get_settings()
    settings.quiz_active = bool(active)
    if not settings.quiz_active:
        settings.quiz_paused = False
    log_service.record("settings", f"Quiz {'activated' if settings.quiz_active else 'deactivated'}")
    db.session.commit()
    return settings


def set_quiz_paused(paused):
    settings = get_settings()
    settings.quiz_paused = bool(paused)
    log_service.record("settings", f"Quiz {'paused' if settings.quiz_paused else 'resumed'}")
    db.session.commit()
    return settings


def settings_payload(settings=None):
    settings = settings or get_settings()
    return {
        "quiz_active": bool(settings.quiz_active),
        "quiz_paused": bool(settings.quiz_paused),
        "status": game_status(settings),
        "updated_at": settings.updated_at.isoformat() if settings.updated_at else None,
    }
