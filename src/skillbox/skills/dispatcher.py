"""Dispatch requests to run a skill's script through a Terminal."""

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel

from skillbox.skills.interpreter import supported_extensions
from skillbox.skills.models import Script, Skill
from skillbox.tools.terminal import ExecutionRequest, Terminal
from skillbox.utils.config import ScriptSettings

if TYPE_CHECKING:
    from skillbox.skills.registry import SkillRegistry

logger = logging.getLogger(__name__)

ScriptErrorKind = Literal[
    "skill_not_found",
    "script_not_found",
    "unsupported_interpreter",
    "interpreter_not_allowed",
    "execution_failed",
]


class ScriptResult(BaseModel):
    """Outcome of a dispatch. `message` is always human readable."""

    ok: bool
    message: str
    error: ScriptErrorKind | None = None

    @classmethod
    def success(cls, message: str) -> "ScriptResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: ScriptErrorKind, message: str) -> "ScriptResult":
        return cls(ok=False, message=message, error=error)

    def __str__(self) -> str:
        return self.message


class ScriptDispatcher:
    """
    Resolve (skill, script) pairs and run them under the script policy.

    The dispatcher only checks policy and builds the ExecutionRequest;
    spawning, output capture, timeouts and approval prompts belong to the
    Terminal. It never raises: every failure comes back as a ScriptResult.
    """

    def __init__(
        self,
        registry: "SkillRegistry",
        terminal: Terminal,
        settings: ScriptSettings | None = None,
    ):
        self.registry = registry
        self.terminal = terminal
        self.settings = settings or ScriptSettings()

    async def execute(
        self,
        skill_name: str,
        script_filename: str,
        args: list[str] | None = None,
    ) -> ScriptResult:
        """
        Run a script from a skill.

        Args:
            skill_name: Skill name (or id)
            script_filename: Script basename or path relative to the skill folder
            args: Arguments passed to the script, one list item per argument

        Returns:
            ScriptResult with the terminal's output, or the reason it did not run
        """
        args = [str(arg) for arg in args or []]

        skill = self.registry.get_skill_by_name(skill_name)
        if skill is None:
            return self._reject(
                "skill_not_found", f"Error: Skill '{skill_name}' not found."
            )

        script = find_script(skill, script_filename)
        if script is None:
            available = ", ".join(s.name for s in skill.scripts) or "(none)"
            return self._reject(
                "script_not_found",
                f"Error: Script '{script_filename}' not found in skill "
                f"'{skill_name}'. Available scripts: {available}",
            )

        if script.interpreter is None:
            return self._reject(
                "unsupported_interpreter",
                f"Error: No interpreter for script '{script.name}'. "
                f"Supported extensions: {', '.join(supported_extensions())}",
            )

        allowed = self.settings.allowed_interpreters
        if script.interpreter not in allowed:
            return self._reject(
                "interpreter_not_allowed",
                f"Error: Interpreter '{script.interpreter}' is not allowed. "
                f"Allowed interpreters: {', '.join(allowed) or '(none)'}",
            )

        request = build_request(skill, script, args, self.settings)
        logger.info(f"Dispatching {skill.id}/{script.relative_path} {args}")

        try:
            result = await self.terminal.run(request)
        except Exception as e:
            logger.error(f"Terminal failed running {script.relative_path}: {e}")
            return ScriptResult.failure(
                "execution_failed", f"Error executing script: {e}"
            )

        if not result.ok:
            return ScriptResult.failure("execution_failed", result.error or "")
        return ScriptResult.success(result.output)

    def _reject(self, error: ScriptErrorKind, message: str) -> ScriptResult:
        logger.info(message)
        return ScriptResult.failure(error, message)


def find_script(skill: Skill, script_filename: str) -> Script | None:
    """
    Find a script by relative path, or else by basename.

    A relative path match wins; among basename matches (same file name in
    different subfolders) the first in path order is used.
    """
    for script in skill.scripts:
        if script.relative_path == script_filename:
            return script

    matches = [script for script in skill.scripts if script.name == script_filename]
    if len(matches) > 1:
        logger.warning(
            f"Script name '{script_filename}' is ambiguous in skill '{skill.id}', "
            f"using {matches[0].relative_path}"
        )
    return matches[0] if matches else None


def build_request(
    skill: Skill, script: Script, args: list[str], settings: ScriptSettings
) -> ExecutionRequest:
    """Build the request that runs script from inside its skill folder."""
    return ExecutionRequest(
        command=[script.interpreter or "", script.relative_path, *args],
        working_directory=skill.folder_path,
        timeout=settings.script_timeout,
        requires_approval=settings.require_script_approval,
    )
