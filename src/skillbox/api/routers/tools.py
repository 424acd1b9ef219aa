"""Agent tool router: function-calling schemas and invocation."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from skillbox.api.deps import get_context
from skillbox.api.schemas import ToolCall, ToolOutput
from skillbox.core.context import SharedContext

router = APIRouter()


@router.get("", response_model=list[dict[str, Any]])
def list_tools(ctx: SharedContext = Depends(get_context)) -> list[dict[str, Any]]:
    """Schemas of the tools available for the enabled skills."""
    return [t.get_tool_schema() for t in ctx.build_tools().values()]


@router.post("/{tool_name}", response_model=ToolOutput)
async def call_tool(
    tool_name: str, data: ToolCall, ctx: SharedContext = Depends(get_context)
) -> ToolOutput:
    """Invoke a tool. Bad arguments come back as an "Error: ..." output."""
    agent_tool = ctx.build_tools().get(tool_name)
    if agent_tool is None:
        raise HTTPException(status_code=404, detail=f"Tool not found: {tool_name}")
    return ToolOutput(output=await agent_tool.execute(**data.arguments))
