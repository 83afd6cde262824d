"""Pydantic models for the candidature (job search) configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ConfigSection(BaseModel):
    # Free-form document written by the model and the user: unknown keys are
    # kept, numbers are accepted where text is expected, null means unset.
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class SkillGroup(_ConfigSection):
    category: str | None = ""
    technologies: str | None = ""


class Candidate(_ConfigSection):
    name: str | None = ""
    position: str | None = ""
    location: str | None = ""
    experience: str | None = ""
    languages: list[str] | None = Field(default_factory=list)
    skills: list[SkillGroup] | None = Field(default_factory=list)
    strengths: list[str] | None = Field(default_factory=list)


class Goals(_ConfigSection):
    salary_target: str | None = ""
    contract_type: str | None = ""
    remote_policy: str | None = ""
    criteria: list[str] | None = Field(default_factory=list)


class TargetCompany(_ConfigSection):
    name: str | None = ""
    sector: str | None = ""
    reason: str | None = ""
    stack: str | None = ""


class Application(_ConfigSection):
    company: str | None = ""
    position: str | None = ""
    date: str | None = ""
    status: str | None = ""
    follow_up: str | None = ""
    notes_path: str | None = ""


class CandidatureConfig(_ConfigSection):
    candidate: Candidate | None = Field(default_factory=Candidate)
    goals: Goals | None = Field(default_factory=Goals)
    target_companies: list[TargetCompany] | None = Field(default_factory=list)
    applications: list[Application] | None = Field(default_factory=list)
