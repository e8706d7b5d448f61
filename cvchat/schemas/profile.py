"""Pydantic schemas for parsed CV and certificate records."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cvchat.utils.helpers import as_dict, as_list, as_loose_items, as_str, as_str_list


class _Lenient(BaseModel):
    """Unknown keys are dropped; wrong-typed values are coerced instead of rejected."""

    model_config = ConfigDict(extra="ignore")


class PersonSchema(_Lenient):
    name: str = ""
    title: str = ""
    location: str = ""
    summary: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str:
        return as_str(v)


class ExperienceSchema(_Lenient):
    organization: str = ""
    role: str = ""
    start: str = ""
    end: str = ""
    tasks: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("organization", "role", "start", "end", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("tasks", "keywords", mode="before")
    @classmethod
    def _coerce_str_list(cls, v: Any) -> List[str]:
        return as_str_list(v)


class ProjectSchema(_Lenient):
    name: str = ""
    role: str = ""
    summary: str = ""
    impact: str = ""
    tech: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)

    @field_validator("name", "role", "summary", "impact", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("tech", "links", mode="before")
    @classmethod
    def _coerce_str_list(cls, v: Any) -> List[str]:
        return as_str_list(v)


class CVProfileSchema(_Lenient):
    """Structured CV as produced by the parsing prompt."""

    person: PersonSchema = Field(default_factory=PersonSchema)
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceSchema] = Field(default_factory=list)
    projects: List[ProjectSchema] = Field(default_factory=list)
    education: List[Any] = Field(default_factory=list)
    certificates: List[Any] = Field(default_factory=list)
    languages: List[Any] = Field(default_factory=list)

    @field_validator("person", mode="before")
    @classmethod
    def _coerce_person(cls, v: Any) -> dict:
        return as_dict(v)

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skills(cls, v: Any) -> List[str]:
        return as_str_list(v)

    @field_validator("experience", "projects", mode="before")
    @classmethod
    def _coerce_entries(cls, v: Any) -> List[dict]:
        return [item for item in as_list(v) if isinstance(item, dict)]

    @field_validator("education", "certificates", "languages", mode="before")
    @classmethod
    def _coerce_loose(cls, v: Any) -> list:
        return as_loose_items(v)


class CertificateSchema(_Lenient):
    title: str = ""
    issuer: str = ""
    date: str = ""

    @field_validator("title", "issuer", "date", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str:
        return as_str(v)
