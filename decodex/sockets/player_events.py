import logging

from flask import request, session
from flask_socketio import emit, join_room, leave_room

from decodex.errors import AuthenticationError
from decodex.services import powerup_service, progression_service, settings_service, team_service
from decodex.sockets.admin_events import broadcast_leaderboard, socket_errors

logger = logging.getLogger(__name__)

# sid -> team name of every joined player connection
connected_teams = {}


def _team_for_request():
    team_name = connected_teams.get(request.sid) or session.get("team_name")
    if not team_name:
        raise AuthenticationError("Join as a team first")
    return team_name


def register_player_events(socketio):

    # ---------------------------
    # PLAYER JOIN
    # ---------------------------
    @socketio.on("player_join")
    @socket_errors
    def handle_join(data=None):
        data = data or {}
        team = team_service.authenticate_team(data.get("name"), data.get("password"))

        connected_teams[request.sid] = team.name
        join_room(team.name)
        logger.info("Team %s joined from %s", team.name, request.sid)

        emit("join_success", team_service.team_payload(team))
        emit("quiz_state", settings_service.settings_payload())
        broadcast_leaderboard()

    @socketio.on("disconnect")
    def handle_disconnect(*args):
        team_name = connected_teams.pop(request.sid, None)
        if team_name:
            leave_room(team_name)
            logger.info("Team %s disconnected", team_name)

    # ---------------------------
    # PLAYER PROGRESSION
    # ---------------------------
    @socketio.on("player_request_question")
    @socket_errors
    def handle_request_question(data=None):
        emit("question", progression_service.get_next_question(_team_for_request()))

    @socketio.on("player_submit_answer")
    @socket_errors
    def handle_answer(data=None):
        data = data or {}
        result = progression_service.submit_answer(
            _team_for_request(),
            data.get("answer"),
            question_id=data.get("question_id"),
        )
        emit("answer_result", result)
        if result["success"]:
            broadcast_leaderboard()

    @socketio.on("player_select_choice")
    @socket_errors
    def handle_select_choice(data=None):
        result = progression_service.select_choice(_team_for_request(), (data or {}).get("difficulty"))
        emit("choice_selected", result)

    @socketio.on("player_use_power_up")
    @socket_errors
    def handle_power_up(data=None):
        kind = (data or {}).get("kind")
        result = powerup_service.consume(_team_for_request(), kind)
        emit("power_up_result", result)
        if kind == "skip":
            broadcast_leaderboard()
