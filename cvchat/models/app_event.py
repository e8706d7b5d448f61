from cvchat.extensions import db
from datetime import datetime
import uuid


class AppEvent(db.Model):
    __tablename__ = "app_events"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = db.Column(db.String(100), nullable=False)
    cv_token = db.Column(db.String(64), nullable=True)
    user_id = db.Column(db.String(36), nullable=True)
    context = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
