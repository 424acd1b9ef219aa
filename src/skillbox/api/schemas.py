"""Pydantic schemas for API request/response models."""

from typing import Any

from pydantic import BaseModel, Field

from skillbox.skills.models import InvocationMode, Skill, SkillState


class SkillView(BaseModel):
    """A skill together with its current state."""

    skill: Skill
    state: SkillState


class SkillStateUpdate(BaseModel):
    """Request body for updating a skill's state (partial updates)."""

    enabled: bool | None = None
    invocation_mode: InvocationMode | None = None


class ScriptRunRequest(BaseModel):
    """Request body for running a skill script."""

    script: str
    args: list[str] = Field(default_factory=list)


class ToolCall(BaseModel):
    """Request body for invoking an agent tool."""

    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolOutput(BaseModel):
    output: str
