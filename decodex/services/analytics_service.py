from extensions import db
from decodex.models import PathEntry, Team
from decodex.services import catalog_service


def _rate(solved, possible):
    return round(solved * 100.0 / possible, 1) if possible else 0.0


def _entry_counts():
    """``{question_id: {"solved": n, "skipped": n}}`` counted in distinct teams."""
    rows = db.session.query(
        PathEntry.question_id,
        PathEntry.skipped,
        db.func.count(db.distinct(PathEntry.team_id)),
    ).group_by(PathEntry.question_id, PathEntry.skipped).all()

    counts = {}
    for question_id, skipped, teams in rows:
        bucket = counts.setdefault(question_id, {"solved": 0, "skipped": 0})
        bucket["skipped" if skipped else "solved"] += teams
    return counts


def question_stats():
    """
    Per-question and per-category progress for the admin dashboard.

    ``success_rate`` is the share of all registered teams that solved the
    question; skips count as getting past it, not as solving it. Branch
    points list their two paths with the same counters.
    """
    total_teams = Team.query.count()
    counts = _entry_counts()
    empty = {"solved": 0, "skipped": 0}

    questions = []
    categories = {}
    for question in catalog_service.all_questions():
        c = counts.get(question.id, empty)
        row = {
            "id": question.id,
            "order_index": question.order_index,
            "title": question.title,
            "category": question.category,
            "difficulty_level": question.difficulty_level,
            "is_active": bool(question.is_active),
            "is_branch_point": bool(question.is_branch_point),
            "solved": c["solved"],
            "skipped": c["skipped"],
            "teams_past": c["solved"] + c["skipped"],
            "success_rate": _rate(c["solved"], total_teams),
            "choices": [],
        }
        for choice in sorted(question.choices, key=lambda ch: ch.difficulty_level):
            cc = counts.get(choice.id, empty)
            row["choices"].append({
                "id": choice.id,
                "difficulty": choice.difficulty_level,
                "solved": cc["solved"],
                "skipped": cc["skipped"],
            })
        questions.append(row)

        if not question.is_active:
            continue
        cat = categories.setdefault(question.category, {"questions": 0, "solved": 0, "skipped": 0})
        cat["questions"] += 1
        cat["solved"] += c["solved"]
        cat["skipped"] += c["skipped"]

    for cat in categories.values():
        cat["success_rate"] = _rate(cat["solved"], cat["questions"] * total_teams)

    active = [q for q in questions if q["is_active"]]
    average = round(sum(q["success_rate"] for q in active) / len(active), 1) if active else 0.0

    return {
        "total_teams": total_teams,
        "total_questions": len(active),
        "average_success_rate": average,
        "questions": questions,
        "categories": categories,
    }
