"""Skills system: discovery, registry and script dispatch."""

from skillbox.skills.discovery import SkillDiscovery
from skillbox.skills.dispatcher import ScriptDispatcher, ScriptResult
from skillbox.skills.interpreter import resolve_interpreter
from skillbox.skills.models import Script, Skill, SkillRoot, SkillState
from skillbox.skills.registry import (
    SKILLS_CHANGED_EVENT,
    SkillRegistry,
    get_skill_registry,
)

__all__ = [
    "SKILLS_CHANGED_EVENT",
    "Script",
    "ScriptDispatcher",
    "ScriptResult",
    "Skill",
    "SkillDiscovery",
    "SkillRegistry",
    "SkillRoot",
    "SkillState",
    "get_skill_registry",
    "resolve_interpreter",
]
