"""Skill, script and per-skill state models."""

from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SkillLocation = Literal["user", "project"]
InvocationMode = Literal["auto", "manual"]


class SkillMetadata(BaseModel):
    """Front matter fields shown to users and agents."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str = ""


class Script(BaseModel):
    """Executable file inside a skill's scripts/ subtree."""

    model_config = ConfigDict(extra="forbid")

    name: str
    relative_path: str  # POSIX, relative to the skill folder
    absolute_path: Path
    interpreter: str | None = None
    description: str | None = None


class Skill(BaseModel):
    """A discovered skill bundle. Rebuilt on every scan, identified by id."""

    model_config = ConfigDict(extra="forbid")

    id: str
    metadata: SkillMetadata
    content: str
    location: SkillLocation
    file_path: Path
    folder_path: Path
    scripts: list[Script] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)


class SkillState(BaseModel):
    """
    Persisted per-skill settings.

    Serialized with camelCase aliases (``invocationMode``, ``lastUsed``) so
    the stored record stays compatible with other readers of the store.
    """

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True
    invocation_mode: InvocationMode = Field(default="auto", alias="invocationMode")
    last_used: datetime | None = Field(default=None, alias="lastUsed")

    def to_record(self) -> dict:
        """Serialize for the state store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SkillRoot(BaseModel):
    """A directory scanned for skill bundles."""

    model_config = ConfigDict(frozen=True)

    path: Path
    location: SkillLocation


class DiscoveryError(BaseModel):
    """A bundle that could not be loaded during a scan."""

    path: Path
    message: str


class DiscoveryResult(BaseModel):
    """Output of a discovery scan."""

    skills: list[Skill] = Field(default_factory=list)
    errors: list[DiscoveryError] = Field(default_factory=list)


class SkillsChanged(BaseModel):
    """Payload of the skills-changed notification."""

    skills: list[Skill]
    states: dict[str, SkillState]
