from skillbox.skills.dispatcher import ScriptDispatcher
from skillbox.skills.registry import SkillRegistry
from skillbox.tools.base import BaseTool
from skillbox.tools.skill_tool import create_run_script_tool, create_skill_tool
from skillbox.tools.terminal import Approver, SubprocessTerminal, Terminal
from skillbox.utils.config import Config


class SharedContext:
    """Global shared state for the application."""

    config: Config
    registry: SkillRegistry
    terminal: Terminal
    dispatcher: ScriptDispatcher

    def __init__(
        self,
        config: Config,
        terminal: Terminal | None = None,
        approver: Approver | None = None,
    ):
        self.config = config
        self.registry = SkillRegistry.from_config(config)
        self.terminal = terminal or SubprocessTerminal(approver=approver)
        self.dispatcher = ScriptDispatcher(
            self.registry, self.terminal, settings=config.scripts
        )

    def build_tools(self) -> dict[str, BaseTool]:
        """
        Agent tools for the currently enabled skills, keyed by tool name.

        Built on each call since the enum of skill names follows the registry.
        """
        tools = [
            create_skill_tool(self.registry),
            create_run_script_tool(self.dispatcher, self.registry),
        ]
        return {t.name: t for t in tools if t is not None}
