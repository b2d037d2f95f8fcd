from flask import Blueprint, jsonify, request, session

from decodex.services import announcement_service, settings_service, team_service
from decodex.services.leaderboard_service import get_leaderboard

public_bp = Blueprint("public", __name__)


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


@public_bp.route("/register", methods=["POST"])
def register():
    data = _payload()
    team = team_service.register_team(data.get("name"), data.get("email"), data.get("password"))
    session["team_name"] = team.name
    return jsonify({"status": "ok", "team": team_service.team_payload(team)}), 201


@public_bp.route("/login", methods=["POST"])
def login():
    data = _payload()
    team = team_service.authenticate_team(data.get("name"), data.get("password"))
    session["team_name"] = team.name
    return jsonify({"status": "ok", "team": team_service.team_payload(team)})


@public_bp.route("/logout", methods=["POST"])
def logout():
    session.pop("team_name", None)
    return jsonify({"status": "ok"})


@public_bp.route("/leaderboard")
def leaderboard():
    return jsonify({"status": "ok", "leaderboard": get_leaderboard()})


@public_bp.route("/settings")
def settings():
    return jsonify({"status": "ok", "settings": settings_service.settings_payload()})


@public_bp.route("/announcements")
def announcements():
    active = announcement_service.get_active_announcements()
    return jsonify({"status": "ok", "announcements": [a.to_dict() for a in active]})
