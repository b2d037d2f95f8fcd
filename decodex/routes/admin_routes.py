from functools import wraps

from flask import Blueprint, current_app, jsonify, request, session

from decodex.errors import AuthenticationError, ValidationError
from decodex.services import (
    analytics_service,
    announcement_service,
    authoring_service,
    branch_service,
    catalog_service,
    log_service,
    powerup_service,
    settings_service,
    team_service,
)
from decodex.services.question_service import get_question_display
from decodex.sockets.admin_events import (
    broadcast_announcement,
    broadcast_leaderboard,
    broadcast_quiz_state,
)

admin_bp = Blueprint("admin", __name__)


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


def _flag(data, key):
    value = data.get(key)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# -------------------
# LOGIN REQUIRED
# -------------------
def login_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not session.get("logged_in"):
            raise AuthenticationError("Admin login required")
        return f(*args, **kwargs)
    return wrapped


@admin_bp.route("/login", methods=["POST"])
def login():
    if _payload().get("password") != current_app.config["ADMIN_PASSWORD"]:
        raise AuthenticationError("Wrong password")
    session["logged_in"] = True
    return jsonify({"status": "ok"})


@admin_bp.route("/logout", methods=["POST"])
def logout():
    session.pop("logged_in", None)
    return jsonify({"status": "ok"})


# -------------------
# QUESTIONS
# -------------------
@admin_bp.route("/questions")
@login_required
def list_questions():
    questions = [get_question_display(q) for q in catalog_service.all_questions()]
    return jsonify({"status": "ok", "questions": questions})


@admin_bp.route("/questions", methods=["POST"])
@login_required
def create_question():
    question = authoring_service.create_question(_payload())
    return jsonify({"status": "ok", "question": get_question_display(question)}), 201


@admin_bp.route("/questions/reorder", methods=["POST"])
@login_required
def reorder_questions():
    ids = _payload().get("ids")
    if not isinstance(ids, list):
        raise ValidationError("'ids' must be a list of question ids")
    authoring_service.reorder_questions(ids)
    return jsonify({"status": "ok"})


@admin_bp.route("/questions/<question_id>")
@login_required
def get_question(question_id):
    question = catalog_service.get_question_by_id(question_id)
    return jsonify({"status": "ok", "question": get_question_display(question)})


@admin_bp.route("/questions/<question_id>", methods=["PUT"])
@login_required
def update_question(question_id):
    question = authoring_service.update_question(question_id, _payload())
    return jsonify({"status": "ok", "question": get_question_display(question)})


@admin_bp.route("/questions/<question_id>", methods=["DELETE"])
@login_required
def delete_question(question_id):
    authoring_service.delete_question(question_id)
    return jsonify({"status": "ok"})


@admin_bp.route("/questions/<question_id>/branch", methods=["POST"])
@login_required
def create_branch(question_id):
    data = _payload()
    question = catalog_service.get_question_by_id(question_id)
    ids = branch_service.create_branch(
        question,
        data.get("easy_question") or data.get("easyQuestion"),
        data.get("hard_question") or data.get("hardQuestion"),
    )
    return jsonify({"status": "ok", **ids}), 201


@admin_bp.route("/questions/<question_id>/branch", methods=["DELETE"])
@login_required
def delete_branch(question_id):
    released = branch_service.delete_branch(question_id)
    return jsonify({"status": "ok", "released_teams": released})


# -------------------
# TEAMS
# -------------------
@admin_bp.route("/teams")
@login_required
def list_teams():
    return jsonify({"status": "ok", "teams": team_service.list_teams()})


@admin_bp.route("/teams/<team_name>")
@login_required
def get_team(team_name):
    return jsonify({"status": "ok", "team": team_service.describe_team(team_name)})


@admin_bp.route("/teams/<team_name>/power-ups", methods=["POST"])
@login_required
def grant_power_up(team_name):
    data = _payload()
    result = powerup_service.grant(team_name, data.get("kind"), data.get("delta", 1))
    return jsonify({"status": "ok", **result})


@admin_bp.route("/power-ups", methods=["POST"])
@login_required
def grant_power_up_by_email():
    data = _payload()
    team = team_service.get_team_by_email(data.get("email"))
    result = powerup_service.grant(team.name, data.get("kind"), data.get("delta", 1))
    return jsonify({"status": "ok", "team": team.name, **result})


@admin_bp.route("/teams/<team_name>/score", methods=["POST"])
@login_required
def adjust_score(team_name):
    result = powerup_service.adjust_score(team_name, _payload().get("delta"))
    broadcast_leaderboard()
    return jsonify({"status": "ok", **result})


# -------------------
# GAME SETTINGS
# -------------------
@admin_bp.route("/settings")
@login_required
def get_settings():
    return jsonify({"status": "ok", "settings": settings_service.settings_payload()})


@admin_bp.route("/settings/active", methods=["POST"])
@login_required
def set_active():
    settings = settings_service.set_quiz_active(_flag(_payload(), "active"))
    broadcast_quiz_state(settings)
    return jsonify({"status": "ok", "settings": settings_service.settings_payload(settings)})


@admin_bp.route("/settings/pause", methods=["POST"])
@login_required
def set_paused():
    settings = settings_service.set_quiz_paused(_flag(_payload(), "paused"))
    broadcast_quiz_state(settings)
    return jsonify({"status": "ok", "settings": settings_service.settings_payload(settings)})


# -------------------
# ANNOUNCEMENTS
# -------------------
@admin_bp.route("/announcements")
@login_required
def list_announcements():
    active = announcement_service.get_active_announcements()
    return jsonify({"status": "ok", "announcements": [a.to_dict() for a in active]})


@admin_bp.route("/announcements", methods=["POST"])
@login_required
def create_announcement():
    data = _payload()
    announcement = announcement_service.create_announcement(
        data.get("title"),
        data.get("message"),
        data.get("type") or "info",
        data.get("duration_seconds") or data.get("duration"),
    )
    broadcast_announcement(announcement)
    return jsonify({"status": "ok", "announcement": announcement.to_dict()}), 201


@admin_bp.route("/announcements/<int:announcement_id>", methods=["DELETE"])
@login_required
def deactivate_announcement(announcement_id):
    announcement_service.deactivate_announcement(announcement_id)
    return jsonify({"status": "ok"})


# -------------------
# LOGS
# -------------------
@admin_bp.route("/logs")
@login_required
def logs():
    limit = request.args.get("limit", 200, type=int)
    return jsonify({"status": "ok", "logs": log_service.recent(limit)})


# -------------------
# ANALYTICS
# -------------------
@admin_bp.route("/analytics")
@login_required
def analytics():
    return jsonify({"status": "ok", **analytics_service.question_stats()})
