"""Pydantic models for JSON-Resume documents."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _JsonResumeModel(BaseModel):
    # JSON Resume is camelCase on the wire and open-ended; unknown keys survive round-trips.
    # Numbers are accepted as text (e.g. a GPA score) and null lists mean "none".
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


class Location(_JsonResumeModel):
    address: str | None = None
    postal_code: str | None = Field(None, alias="postalCode")
    city: str | None = None
    country_code: str | None = Field(None, alias="countryCode")
    region: str | None = None


class Profile(_JsonResumeModel):
    network: str | None = None
    username: str | None = None
    url: str | None = None


class Basics(_JsonResumeModel):
    """Personal-identifying part of a resume."""

    name: str | None = None
    label: str | None = None
    image: str | None = None  # usually a base64 data URL
    email: str | None = None
    phone: str | None = None
    url: str | None = None
    summary: str | None = None
    location: Location | None = None
    profiles: list[Profile] | None = None


class WorkItem(_JsonResumeModel):
    name: str | None = None
    position: str | None = None
    url: str | None = None
    start_date: str | None = Field(None, alias="startDate")
    end_date: str | None = Field(None, alias="endDate")
    summary: str | None = None
    highlights: list[str] | None = Field(default_factory=list)


class EducationItem(_JsonResumeModel):
    institution: str | None = None
    url: str | None = None
    area: str | None = None
    study_type: str | None = Field(None, alias="studyType")
    start_date: str | None = Field(None, alias="startDate")
    end_date: str | None = Field(None, alias="endDate")
    score: str | None = None
    courses: list[str] | None = Field(default_factory=list)


class Skill(_JsonResumeModel):
    name: str | None = None
    level: str | None = None
    keywords: list[str] | None = Field(default_factory=list)


class Language(_JsonResumeModel):
    language: str | None = None
    fluency: str | None = None


class ProjectItem(_JsonResumeModel):
    name: str | None = None
    description: str | None = None
    url: str | None = None
    start_date: str | None = Field(None, alias="startDate")
    end_date: str | None = Field(None, alias="endDate")
    highlights: list[str] | None = Field(default_factory=list)


class ResumeDocument(_JsonResumeModel):
    basics: Basics | None = None
    work: list[WorkItem] | None = Field(default_factory=list)
    volunteer: list[dict[str, Any]] | None = Field(default_factory=list)
    education: list[EducationItem] | None = Field(default_factory=list)
    awards: list[dict[str, Any]] | None = Field(default_factory=list)
    certificates: list[dict[str, Any]] | None = Field(default_factory=list)
    publications: list[dict[str, Any]] | None = Field(default_factory=list)
    skills: list[Skill] | None = Field(default_factory=list)
    languages: list[Language] | None = Field(default_factory=list)
    interests: list[dict[str, Any]] | None = Field(default_factory=list)
    references: list[dict[str, Any]] | None = Field(default_factory=list)
    projects: list[ProjectItem] | None = Field(default_factory=list)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with JSON-Resume (camelCase) keys, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def with_basics(self, basics: Basics | None) -> ResumeDocument:
        """Return a copy whose ``basics`` is replaced by ``basics``."""
        return self.model_copy(update={"basics": basics.model_copy(deep=True) if basics else None})

    def sanitized(self) -> ResumeDocument:
        """Copy stripped of personal data: only ``summary`` and ``label`` stay in basics."""
        basics = self.basics or Basics()
        return self.model_copy(
            update={"basics": Basics(summary=basics.summary, label=basics.label)}
        )
