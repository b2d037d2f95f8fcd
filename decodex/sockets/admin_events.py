import logging
from functools import wraps

from flask import session
from flask_socketio import emit

from extensions import socketio
from decodex.errors import AuthenticationError, DecodexError
from decodex.services import announcement_service, powerup_service, settings_service, team_service
from decodex.services.leaderboard_service import get_leaderboard

logger = logging.getLogger(__name__)


# --- BROADCASTS ---

def broadcast_leaderboard():
    """Sends the current standings to every client, the big screen included."""
    leaderboard = get_leaderboard()
    socketio.emit("update_leaderboard", leaderboard)
    return leaderboard


def broadcast_quiz_state(settings=None):
    state = settings_service.settings_payload(settings)
    socketio.emit("quiz_state", state)
    return state


def broadcast_announcement(announcement):
    socketio.emit("announcement", announcement.to_dict())


# --- HANDLER HELPERS ---

def socket_errors(f):
    """Turns engine errors into an ``error`` event for the calling client."""
    @wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except DecodexError as e:
            logger.info("Socket handler %s failed: %s", f.__name__, e.message)
            emit("error", e.to_dict())
    return wrapped


def admin_only(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not session.get("logged_in"):
            raise AuthenticationError("Admin login required")
        return f(*args, **kwargs)
    return wrapped


def register_admin_events(socketio):

    @socketio.on("admin_set_quiz_active")
    @socket_errors
    @admin_only
    def handle_set_active(data=None):
        settings = settings_service.set_quiz_active(bool((data or {}).get("active")))
        broadcast_quiz_state(settings)

    @socketio.on("admin_toggle_pause")
    @socket_errors
    @admin_only
    def handle_toggle_pause(data=None):
        current = settings_service.get_settings()
        settings = settings_service.set_quiz_paused(not current.quiz_paused)
        broadcast_quiz_state(settings)

    @socketio.on("admin_get_teams")
    @socket_errors
    @admin_only
    def handle_get_teams(data=None):
        emit("admin_team_list", team_service.list_teams())

    @socketio.on("admin_grant_power_up")
    @socket_errors
    @admin_only
    def handle_grant(data=None):
        data = data or {}
        team_name = data.get("team")
        result = powerup_service.grant(team_name, data.get("kind"), data.get("delta", 1))
        emit("admin_power_up_granted", {"team": team_name, **result})
        # Let the team's devices refresh their inventory
        socketio.emit("power_ups_updated", result["power_ups"], to=team_name)

    @socketio.on("admin_broadcast_announcement")
    @socket_errors
    @admin_only
    def handle_announcement(data=None):
        data = data or {}
        announcement = announcement_service.create_announcement(
            data.get("title"),
            data.get("message"),
            data.get("type") or "info",
            data.get("duration_seconds"),
        )
        broadcast_announcement(announcement)
