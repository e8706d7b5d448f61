from cvchat.extensions import db
from datetime import datetime
import uuid


class CV(db.Model):
    """One parsed résumé profile, addressed everywhere by its opaque token."""
    __tablename__ = "cvs"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    token = db.Column(db.String(64), unique=True, nullable=False, index=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    data = db.Column(db.JSON, nullable=False)

    is_published = db.Column(db.Boolean, nullable=False, default=False)
    share_enabled = db.Column(db.Boolean, nullable=False, default=False)
    share_token = db.Column(db.String(64), unique=True, nullable=True)
    published_data = db.Column(db.JSON, nullable=True)
    published_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="cvs")
    meta = db.relationship("CVMeta", back_populates="cv", uselist=False, cascade="all, delete-orphan")
    certificates = db.relationship(
        "Certificate", back_populates="cv", cascade="all, delete-orphan", order_by="Certificate.created_at"
    )
    references = db.relationship(
        "ReferenceDocument", back_populates="cv", cascade="all, delete-orphan", order_by="ReferenceDocument.created_at"
    )
    additional_texts = db.relationship(
        "AdditionalText", back_populates="cv", cascade="all, delete-orphan", order_by="AdditionalText.created_at"
    )


class CVMeta(db.Model):
    """Denormalized {name, position, summary, imageUrl} projection of the profile."""
    __tablename__ = "cv_meta"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cv_token = db.Column(db.String(64), db.ForeignKey("cvs.token", ondelete="CASCADE"), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")
    position = db.Column(db.String(255), nullable=False, default="")
    summary = db.Column(db.Text, nullable=False, default="")
    image_url = db.Column(db.String(512), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    cv = db.relationship("CV", back_populates="meta")

    def to_dict(self):
        return {
            "name": self.name,
            "position": self.position,
            "summary": self.summary,
            "imageUrl": self.image_url,
        }
