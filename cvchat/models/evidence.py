from cvchat.extensions import db
from datetime import datetime
import uuid


class Certificate(db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cv_token = db.Column(db.String(64), db.ForeignKey("cvs.token", ondelete="CASCADE"), nullable=False, index=True)
    data = db.Column(db.JSON, nullable=False)
    # extracted PDF text, kept for traceability and re-parsing
    raw_text = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cv = db.relationship("CV", back_populates="certificates")


class ReferenceDocument(db.Model):
    __tablename__ = "reference_documents"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cv_token = db.Column(db.String(64), db.ForeignKey("cvs.token", ondelete="CASCADE"), nullable=False, index=True)
    raw_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cv = db.relationship("CV", back_populates="references")


class AdditionalText(db.Model):
    __tablename__ = "additional_texts"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cv_token = db.Column(db.String(64), db.ForeignKey("cvs.token", ondelete="CASCADE"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cv = db.relationship("CV", back_populates="additional_texts")
