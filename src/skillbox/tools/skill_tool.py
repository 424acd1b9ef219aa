"""Tool factories exposing skills to an agent."""

from typing import TYPE_CHECKING

from skillbox.core.exceptions import SkillNotFoundError
from skillbox.tools.base import FunctionTool, tool

if TYPE_CHECKING:
    from skillbox.skills.dispatcher import ScriptDispatcher
    from skillbox.skills.registry import SkillRegistry


def create_skill_tool(registry: "SkillRegistry") -> FunctionTool | None:
    """Factory function to create the skill loading tool.

    Args:
        registry: Initialized SkillRegistry

    Returns:
        Tool that returns a skill's instructions, or None if no skill is enabled
    """
    skills = registry.get_enabled_skills()
    if not skills:
        return None

    skills_xml = "<skills>\n"
    for skill in skills:
        skills_xml += (
            f'  <skill name="{skill.metadata.name}">'
            f"{skill.metadata.description}</skill>\n"
        )
    skills_xml += "</skills>"

    @tool(
        name="skill",
        description=f"Load and invoke a specialized skill. {skills_xml}",
        parameters={
            "type": "object",
            "properties": {
                "skill_name": {
                    "type": "string",
                    "enum": [skill.id for skill in skills],
                    "description": "The name of the skill to load",
                }
            },
            "required": ["skill_name"],
        },
    )
    async def skill_tool(skill_name: str) -> str:
        """Return the skill's instructions plus its scripts and references."""
        skill = registry.get_skill(skill_name) or registry.get_skill_by_name(skill_name)
        state = registry.get_skill_state(skill.id) if skill else None
        if skill is None or state is None or not state.enabled:
            return (
                f"Error: Skill '{skill_name}' not found. "
                "It may have been removed or is unavailable."
            )

        try:
            await registry.record_skill_usage(skill.id)
        except SkillNotFoundError:
            return f"Error: Skill '{skill_name}' was removed."

        sections = [skill.content]
        if skill.scripts:
            lines = []
            for script in skill.scripts:
                line = f"- {script.relative_path}"
                if script.description:
                    line += f": {script.description}"
                lines.append(line)
            sections.append("Scripts (run with run_skill_script):\n" + "\n".join(lines))
        if skill.references:
            sections.append(
                "References:\n" + "\n".join(f"- {ref}" for ref in skill.references)
            )
        return "\n\n".join(sections)

    return skill_tool


def create_run_script_tool(
    dispatcher: "ScriptDispatcher", registry: "SkillRegistry"
) -> FunctionTool | None:
    """Factory function to create the script execution tool.

    Args:
        dispatcher: ScriptDispatcher that applies the script policy
        registry: Initialized SkillRegistry

    Returns:
        Tool that runs a script of an enabled skill, or None if no enabled
        skill ships scripts
    """
    skills = [skill for skill in registry.get_enabled_skills() if skill.scripts]
    if not skills:
        return None

    @tool(
        name="run_skill_script",
        description=(
            "Run a script bundled with a skill. The script runs inside the "
            "skill's folder and its combined output is returned."
        ),
        parameters={
            "type": "object",
            "properties": {
                "skill_name": {
                    "type": "string",
                    "enum": [skill.metadata.name for skill in skills],
                    "description": "The skill that owns the script",
                },
                "script": {
                    "type": "string",
                    "description": "Script file name or path relative to the skill",
                },
                "args": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Command-line arguments, one item per argument",
                },
            },
            "required": ["skill_name", "script"],
        },
    )
    async def run_skill_script(
        skill_name: str, script: str, args: list[str] | None = None
    ) -> str:
        skill = registry.get_skill_by_name(skill_name)
        state = registry.get_skill_state(skill.id) if skill else None
        if state is not None and not state.enabled:
            return f"Error: Skill '{skill_name}' is disabled."

        result = await dispatcher.execute(skill_name, script, args or [])
        return result.message

    return run_skill_script
