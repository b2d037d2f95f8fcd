import datetime

from decodex.models import Team
from decodex.services import catalog_service
from decodex.services.team_service import team_state

# Teams that never answered sort after everyone who did
_NEVER = datetime.datetime.max


def _sort_key(team):
    return (-(team.score or 0), team.last_answered or _NEVER, team.name)


def get_leaderboard():
    """Teams by score, ties broken by whoever reached that score first."""
    total = catalog_service.count_active()
    teams = sorted(Team.query.all(), key=_sort_key)

    board = []
    for rank, team in enumerate(teams, start=1):
        board.append({
            "rank": rank,
            "name": team.name,
            "score": int(team.score or 0),
            "bonus_points": int(team.bonus_points or 0),
            "state": team_state(team, total),
            "completion_rank": team.completion_rank,
            "completion_time": team.completion_time.isoformat() if team.completion_time else None,
            "last_answered": team.last_answered.isoformat() if team.last_answered else None,
        })
    return board
