from datetime import datetime

from routely.extensions import db

MOODS = ("happy", "neutral", "stressed", "excited", "tired", "other")


class JournalEntry(db.Model):
    __tablename__ = "journal_entries"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)

    location_name = db.Column(db.String(200), nullable=True)
    location_lat = db.Column(db.Float, nullable=True)
    location_lng = db.Column(db.Float, nullable=True)

    tags = db.Column(db.JSON, nullable=False, default=list)
    mood = db.Column(db.String(16), nullable=True)

    points_awarded = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self):
        location = None
        if self.location_name or self.location_lat is not None or self.location_lng is not None:
            location = {"name": self.location_name, "lat": self.location_lat, "lng": self.location_lng}
        return {
            "id": int(self.id),
            "user_id": int(self.user_id),
            "title": self.title,
            "content": self.content,
            "location": location,
            "tags": list(self.tags or []),
            "mood": self.mood,
            "points_awarded": int(self.points_awarded or 0),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
