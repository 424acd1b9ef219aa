"""Agent-facing tools and the command execution capability."""

from skillbox.tools.base import BaseTool, FunctionTool, tool
from skillbox.tools.skill_tool import create_run_script_tool, create_skill_tool
from skillbox.tools.terminal import (
    ExecutionRequest,
    ExecutionResult,
    SubprocessTerminal,
    Terminal,
)

__all__ = [
    "BaseTool",
    "ExecutionRequest",
    "ExecutionResult",
    "FunctionTool",
    "SubprocessTerminal",
    "Terminal",
    "create_run_script_tool",
    "create_skill_tool",
    "tool",
]
