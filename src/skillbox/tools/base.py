"""Base tool interface and decorator."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable


class BaseTool(ABC):
    """Abstract base class for agent-facing tools."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema for function calling

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """Execute the tool.

        Args:
            **kwargs: Tool-specific arguments, as decoded from the model's call
        """

    def get_tool_schema(self) -> dict[str, Any]:
        """Get the tool/function schema for function calling."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def check_arguments(self, arguments: dict[str, Any]) -> str | None:
        """
        Compare call arguments against the declared parameters.

        Returns:
            An error message for the caller, or None if the call is usable
        """
        properties = self.parameters.get("properties", {})
        missing = [
            name for name in self.parameters.get("required", []) if name not in arguments
        ]
        if missing:
            return (
                f"Error: Missing required argument(s) for {self.name}: "
                f"{', '.join(missing)}"
            )

        unknown = [name for name in arguments if name not in properties]
        if unknown:
            return f"Error: Unknown argument(s) for {self.name}: {', '.join(unknown)}"

        for name, value in arguments.items():
            allowed = properties[name].get("enum")
            if allowed is not None and value not in allowed:
                return (
                    f"Error: Invalid value '{value}' for {name}. "
                    f"Expected one of: {', '.join(map(str, allowed))}"
                )
        return None


def tool(name: str, description: str, parameters: dict[str, Any]) -> Callable:
    """Decorator to register a function as a tool."""

    def decorator(func: Callable) -> "FunctionTool":
        return FunctionTool(name, description, parameters, func)

    return decorator


class FunctionTool(BaseTool):
    """A tool created from a function using the @tool decorator."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        func: Callable,
    ):
        self.name = name
        self.description = description
        self.parameters = parameters
        self._func = func

    async def execute(self, **kwargs: Any) -> str:
        """Check the arguments, then run the underlying function."""
        error = self.check_arguments(kwargs)
        if error:
            return error

        result = self._func(**kwargs)
        if asyncio.iscoroutine(result):
            result = await result
        return str(result)
