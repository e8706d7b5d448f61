"""Schema exports."""

from .profile import CertificateSchema, CVProfileSchema, ExperienceSchema, PersonSchema, ProjectSchema

__all__ = ["CVProfileSchema", "CertificateSchema", "PersonSchema", "ExperienceSchema", "ProjectSchema"]
