import logging

from decodex.errors import Exhausted, InvalidState, ValidationError
from decodex.models.team import POWER_UP_COLUMNS
from decodex.services import log_service, progression_service, store
from decodex.services.team_service import team_state

logger = logging.getLogger(__name__)

POWER_UP_KINDS = tuple(POWER_UP_COLUMNS)
BOOST_KINDS = ("brainBoost", "doublePoints")


def _check_kind(kind):
    if kind not in POWER_UP_KINDS:
        raise ValidationError(f"Unknown power-up '{kind}'")


def grant(team_name, kind, delta):
    """Admin grant; the resulting balance is clamped at zero, never below."""
    _check_kind(kind)
    try:
        delta = int(delta)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {delta}")

    with store.team_transaction(team_name) as team:
        before = team.power_up_count(kind)
        team.set_power_up_count(kind, before + delta)
        after = team.power_up_count(kind)
        log_service.record("power_ups", f"{kind} for {team_name}: {before} -> {after} (delta {delta})")
        power_ups = team.power_ups

    return {"success": True, "kind": kind, "count": after, "power_ups": power_ups}


def adjust_score(team_name, delta):
    """Admin score correction, clamped at zero."""
    try:
        delta = int(delta)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {delta}")

    with store.team_transaction(team_name) as team:
        before = team.score or 0
        team.score = max(0, before + delta)
        after = team.score
        log_service.record("score", f"Score for {team_name}: {before} -> {after} (delta {delta})")

    return {"success": True, "score": after}


def consume(team_name, kind, settings=None):
    """
    Uses one power-up of ``kind``.

    * ``hint``: returns the hint of the current question.
    * ``brainBoost`` / ``doublePoints``: arm the x2 multiplier for the next
      correct answer. Arming twice does not stack.
    * ``skip``: handed to the progression engine.
    """
    _check_kind(kind)
    if kind == "skip":
        return progression_service.skip(team_name, settings=settings)

    with store.team_transaction(team_name) as team:
        if team.power_up_count(kind) <= 0:
            raise Exhausted(f"No {kind} power-ups left")

        result = {"success": True, "kind": kind}
        if kind == "hint":
            if team_state(team) != "awaiting_question":
                raise InvalidState("There is no question to reveal a hint for")
            question = progression_service.current_question(team)
            result["hint"] = (question.hint or "") if question else ""
            result["question_id"] = question.id if question else None
        else:
            team.brain_boost_active = True
            result["brain_boost_active"] = True

        team.set_power_up_count(kind, team.power_up_count(kind) - 1)
        result["power_ups"] = team.power_ups

    logger.info("Team %s used %s", team_name, kind)
    return result
