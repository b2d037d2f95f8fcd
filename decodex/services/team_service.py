import logging
import re

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from decodex.errors import AuthenticationError, NotFound, ValidationError
from decodex.models import Team
from decodex.models.team import POWER_UP_COLUMNS
from decodex.services import catalog_service, log_service
from decodex.services.store import get_team

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def register_team(name, email, password):
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise ValidationError("Team name, email and password are required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    if Team.query.filter_by(name=name).first():
        raise ValidationError(f"Team name '{name}' is already taken")
    if Team.query.filter_by(email=email).first():
        raise ValidationError("Email is already registered")

    team = Team(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        score=0,
        current_question=0,
        bonus_points=0,
        brain_boost_active=False,
    )
    defaults = current_app.config.get("DEFAULT_POWER_UPS", {})
    for kind in POWER_UP_COLUMNS:
        team.set_power_up_count(kind, defaults.get(kind, 0))

    db.session.add(team)
    log_service.record("teams", f"Registered team {name}")
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Team name or email is already registered")
    return team


def authenticate_team(name, password):
    team = Team.query.filter_by(name=(name or "").strip()).first()
    if not team or not check_password_hash(team.password_hash, password or ""):
        logger.info("Failed login for team %s", name)
        raise AuthenticationError("Invalid team name or password")
    return team


def get_team_by_email(email):
    team = Team.query.filter_by(email=(email or "").strip().lower()).first()
    if not team:
        raise NotFound(f"No team registered with {email}")
    return team


def team_state(team, total=None):
    if team.completion_time is not None:
        return "complete"
    if team.pending_branch_id:
        return "awaiting_choice"
    if team.current_question_id:
        return "awaiting_question"
    total = catalog_service.count_active() if total is None else total
    if team.current_question >= total:
        return "complete"
    return "awaiting_question"


def team_payload(team, total=None, include_path=False):
    total = catalog_service.count_active() if total is None else total
    data = {
        "name": team.name,
        "email": team.email,
        "score": int(team.score or 0),
        "current_question": int(team.current_question or 0),
        "current_question_id": team.current_question_id,
        "pending_branch_id": team.pending_branch_id,
        "state": team_state(team, total),
        "total_questions": total,
        "power_ups": team.power_ups,
        "brain_boost_active": bool(team.brain_boost_active),
        "last_answered": team.last_answered.isoformat() if team.last_answered else None,
        "completion_time": team.completion_time.isoformat() if team.completion_time else None,
        "completion_rank": team.completion_rank,
        "bonus_points": int(team.bonus_points or 0),
    }
    if include_path:
        data["question_path"] = [entry.to_dict() for entry in team.path_entries]
    return data


def list_teams():
    total = catalog_service.count_active()
    return [team_payload(t, total) for t in Team.query.order_by(Team.name).all()]


def describe_team(team_name):
    return team_payload(get_team(team_name), include_path=True)
