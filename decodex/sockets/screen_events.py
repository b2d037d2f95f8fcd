from flask_socketio import emit

from decodex.services import announcement_service, settings_service
from decodex.services.leaderboard_service import get_leaderboard


def register_screen_events(socketio):

    @socketio.on("screen_ready")
    def handle_screen_ready(data=None):
        # The screen only listens; send it everything it needs to draw
        emit("update_leaderboard", get_leaderboard())
        emit("quiz_state", settings_service.settings_payload())
        for announcement in announcement_service.get_active_announcements():
            emit("announcement", announcement.to_dict())
