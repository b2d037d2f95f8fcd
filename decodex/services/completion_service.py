"""
Completion ranks and bonuses.

A team completes once its pointer passes the last active question. Ranks are
handed out in arrival order under ``store.completion_lock`` and committed
before the lock is released.
"""
import datetime
import logging

from flask import current_app

from decodex.models import Team
from decodex.services import catalog_service, log_service, store
from decodex.services.grading_service import completion_bonus_for_rank

logger = logging.getLogger(__name__)


def _rank_and_bonus(team, now, award_bonus):
    config = current_app.config
    rank = Team.query.filter(Team.completion_time.isnot(None), Team.id != team.id).count() + 1
    bonus = 0
    if award_bonus:
        bonus = completion_bonus_for_rank(
            rank,
            config.get("COMPLETION_BONUSES", []),
            config.get("COMPLETION_BONUS_FLOOR", 0),
        )
    team.completion_time = now
    team.completion_rank = rank
    team.bonus_points = (team.bonus_points or 0) + bonus
    team.score = (team.score or 0) + bonus
    return rank, bonus


def complete_team(team, now, award_bonus):
    """Marks ``team`` complete and commits the current session."""
    with store.acquire(store.completion_lock, "completion ranking"):
        rank, bonus = _rank_and_bonus(team, now, award_bonus)
        store.commit()

    logger.info("Team %s completed the sequence at rank %s (+%s bonus)", team.name, rank, bonus)
    return {"is_complete": True, "completion_rank": rank, "bonus_points": bonus}


def _arrival_key(team):
    return (team.last_answered or datetime.datetime.max, team.id)


def complete_stranded_teams(now=None):
    """
    Completes teams that a catalog change left past the end of the sequence.

    Only teams that already got past at least one question qualify; they
    answered or skipped everything still in the sequence, so they get the
    usual completion bonus for their rank. Commits the current session,
    including whatever catalog change the caller made.
    """
    now = now or datetime.datetime.utcnow()
    with store.acquire(store.completion_lock, "completion ranking"):
        total = catalog_service.count_active()
        stranded = Team.query.filter(
            Team.completion_time.is_(None),
            Team.current_question_id.is_(None),
            Team.pending_branch_id.is_(None),
            Team.current_question >= total,
            Team.path_entries.any(),
        ).all()

        for team in sorted(stranded, key=_arrival_key):
            rank, bonus = _rank_and_bonus(team, now, award_bonus=True)
            log_service.record(
                "completion",
                f"Team {team.name} completed after a catalog change at rank {rank} (+{bonus} bonus)",
            )
        store.commit()

    return len(stranded)
