from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from routely.extensions import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(255), unique=True, index=True, nullable=False)
    phone = db.Column(db.String(32), nullable=True)

    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Gamification balance and activity counters. Never negative.
    points = db.Column(db.Integer, nullable=False, default=0, index=True)
    journal_entries_count = db.Column(db.Integer, nullable=False, default=0)
    incidents_reported_count = db.Column(db.Integer, nullable=False, default=0)
    last_journal_entry_at = db.Column(db.DateTime, nullable=True)
    last_incident_reported_at = db.Column(db.DateTime, nullable=True)

    # Bumped on every UPDATE; a stale version makes the flush fail
    version_id = db.Column(db.Integer, nullable=False, default=1)

    actions = db.relationship(
        "UserAction",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserAction.timestamp",
    )
    achievements = db.relationship(
        "UserAchievement",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserAchievement.unlocked_at",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def set_password(self, raw_password: str) -> None:
        self.password_hash = generate_password_hash(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password_hash(self.password_hash, raw_password)

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.achievement_id == achievement_id for a in self.achievements)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "points": int(self.points or 0),
            "achievements_count": len(self.achievements),
            "journal_entries_count": int(self.journal_entries_count or 0),
            "incidents_reported_count": int(self.incidents_reported_count or 0),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "points": int(self.points or 0),
            "journal_entries_count": int(self.journal_entries_count or 0),
            "incidents_reported_count": int(self.incidents_reported_count or 0),
            "achievements": [a.to_dict() for a in self.achievements],
        }
