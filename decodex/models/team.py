from extensions import db
import datetime


POWER_UP_COLUMNS = {
    "hint": "hint_count",
    "skip": "skip_count",
    "brainBoost": "brain_boost_count",
    "doublePoints": "double_points_count",
}


class Team(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)

    # Pointer: index into the active sequence, or an explicit choice question
    current_question = db.Column(db.Integer, default=0, nullable=False)
    current_question_id = db.Column(db.String(36), nullable=True)
    pending_branch_id = db.Column(db.String(36), nullable=True)

    hint_count = db.Column(db.Integer, default=0, nullable=False)
    skip_count = db.Column(db.Integer, default=0, nullable=False)
    brain_boost_count = db.Column(db.Integer, default=0, nullable=False)
    double_points_count = db.Column(db.Integer, default=0, nullable=False)
    brain_boost_active = db.Column(db.Boolean, default=False, nullable=False)

    last_answered = db.Column(db.DateTime, nullable=True)
    completion_time = db.Column(db.DateTime, nullable=True)
    completion_rank = db.Column(db.Integer, nullable=True)
    bonus_points = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    version = db.Column(db.Integer, nullable=False, default=1)

    path_entries = db.relationship(
        "PathEntry",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="PathEntry.id",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        db.CheckConstraint("score >= 0", name="ck_team_score_non_negative"),
        db.Index("ix_team_current_question_id", "current_question_id"),
    )

    @property
    def power_ups(self):
        return {kind: getattr(self, column) for kind, column in POWER_UP_COLUMNS.items()}

    def power_up_count(self, kind):
        return getattr(self, POWER_UP_COLUMNS[kind])

    def set_power_up_count(self, kind, value):
        setattr(self, POWER_UP_COLUMNS[kind], max(0, int(value)))
