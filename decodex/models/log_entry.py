from datetime import datetime

from extensions import db


class LogEntry(db.Model):
    """Audit trail of admin actions and engine events."""
    __tablename__ = "log_entries"

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    source = db.Column(db.String(50), nullable=False)
    message = db.Column(db.Text, nullable=False)

    __table_args__ = (
        db.Index("ix_log_entries_source", "source"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "source": self.source,
            "message": self.message,
        }
