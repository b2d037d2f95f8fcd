from functools import wraps

from flask import Blueprint, g, jsonify, request, session

from decodex.errors import AuthenticationError
from decodex.services import powerup_service, progression_service, team_service
from decodex.sockets.admin_events import broadcast_leaderboard

player_bp = Blueprint("player", __name__)


# -------------------
# TEAM LOGIN REQUIRED
# -------------------
def team_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        team_name = session.get("team_name")
        if not team_name:
            raise AuthenticationError("Log in as a team first")
        g.team_name = team_name
        return f(*args, **kwargs)
    return wrapped


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


@player_bp.route("/question")
@team_required
def next_question():
    result = progression_service.get_next_question(g.team_name)
    return jsonify({"status": "ok", **result})


@player_bp.route("/answer", methods=["POST"])
@team_required
def answer():
    data = _payload()
    result = progression_service.submit_answer(
        g.team_name,
        data.get("answer"),
        question_id=data.get("question_id") or data.get("questionId"),
    )
    if result["success"]:
        broadcast_leaderboard()
    return jsonify({"status": "ok", **result})


@player_bp.route("/choice", methods=["POST"])
@team_required
def choice():
    data = _payload()
    result = progression_service.select_choice(g.team_name, data.get("difficulty"))
    return jsonify({"status": "ok", **result})


@player_bp.route("/power-ups/<kind>", methods=["POST"])
@team_required
def use_power_up(kind):
    result = powerup_service.consume(g.team_name, kind)
    if kind == "skip":
        broadcast_leaderboard()
    return jsonify({"status": "ok", **result})


@player_bp.route("/progress")
@team_required
def progress():
    return jsonify({"status": "ok", "team": team_service.describe_team(g.team_name)})
