from datetime import datetime

from routely.extensions import db


class UserAction(db.Model):
    """One entry of a user's sliding rate-limit log."""

    __tablename__ = "user_actions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    action = db.Column(db.String(16), nullable=False)  # journal/incident
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", back_populates="actions")

    def to_dict(self):
        return {
            "action": self.action,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
