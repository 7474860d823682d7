from datetime import datetime

from routely.extensions import db


class Achievement(db.Model):
    """Catalog entry. Seeded and upserted by its natural key."""

    __tablename__ = "achievements"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.String(255), nullable=False, default="")
    icon = db.Column(db.String(16), nullable=False, default="\U0001F3C6")
    category = db.Column(db.String(32), nullable=False)  # journal, incident, pollution, traffic, safety, community

    # requirement key -> threshold, all of which must hold
    requirements = db.Column(db.JSON, nullable=False, default=dict)
    points_reward = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "requirements": dict(self.requirements or {}),
            "points_reward": int(self.points_reward or 0),
        }


class UserAchievement(db.Model):
    __tablename__ = "user_achievements"
    __table_args__ = (
        db.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    achievement_id = db.Column(db.String(64), db.ForeignKey("achievements.id"), nullable=False, index=True)
    unlocked_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", back_populates="achievements")

    def to_dict(self):
        return {
            "achievement_id": self.achievement_id,
            "unlocked_at": self.unlocked_at.isoformat() if self.unlocked_at else None,
        }
