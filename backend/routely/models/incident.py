from datetime import datetime

from routely.extensions import db

INCIDENT_TYPES = ("Air Pollution", "Flood", "Road Block", "Accident", "Other")


class Incident(db.Model):
    __tablename__ = "incidents"

    id = db.Column(db.Integer, primary_key=True)

    # Anonymous reports have no owner
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    type = db.Column(db.String(32), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    points_awarded = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": int(self.id),
            "user_id": int(self.user_id) if self.user_id is not None else None,
            "type": self.type,
            "description": self.description or "",
            "lat": float(self.lat),
            "lng": float(self.lng),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "points_awarded": int(self.points_awarded or 0),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
