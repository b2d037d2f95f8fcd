from extensions import db
import datetime


class PathEntry(db.Model):
    """Append-only record of a question a team got past."""
    __tablename__ = "path_entry"

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    question_id = db.Column(db.String(36), nullable=False)
    is_choice_question = db.Column(db.Boolean, default=False)
    answer = db.Column(db.String(500), default="")
    skipped = db.Column(db.Boolean, default=False)
    points = db.Column(db.Integer, default=0)
    timestamp = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    team = db.relationship("Team", back_populates="path_entries")

    __table_args__ = (
        db.Index("ix_path_entry_team", "team_id"),
    )

    def to_dict(self):
        return {
            "question_id": self.question_id,
            "answer": self.answer or "",
            "skipped": bool(self.skipped),
            "points": int(self.points or 0),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
