"""Skill resource router."""

from fastapi import APIRouter, Depends, HTTPException

from skillbox.api.deps import get_context
from skillbox.api.schemas import ScriptRunRequest, SkillStateUpdate, SkillView
from skillbox.core.context import SharedContext
from skillbox.core.exceptions import SkillNotFoundError
from skillbox.skills.dispatcher import ScriptResult
from skillbox.skills.models import SkillState

router = APIRouter()


def _view(ctx: SharedContext, skill_id: str) -> SkillView:
    skill = ctx.registry.get_skill(skill_id)
    state = ctx.registry.get_skill_state(skill_id)
    if skill is None or state is None:
        raise HTTPException(status_code=404, detail=f"Skill not found: {skill_id}")
    return SkillView(skill=skill, state=state)


@router.get("", response_model=list[SkillView])
def list_skills(ctx: SharedContext = Depends(get_context)) -> list[SkillView]:
    """List all skills with their state."""
    return [_view(ctx, skill.id) for skill in ctx.registry.get_all_skills()]


@router.post("/refresh", response_model=list[SkillView])
async def refresh_skills(ctx: SharedContext = Depends(get_context)) -> list[SkillView]:
    """Rescan skill directories."""
    await ctx.registry.refresh()
    return [_view(ctx, skill.id) for skill in ctx.registry.get_all_skills()]


@router.get("/{skill_id}", response_model=SkillView)
def get_skill(skill_id: str, ctx: SharedContext = Depends(get_context)) -> SkillView:
    """Get skill by ID."""
    return _view(ctx, skill_id)


@router.patch("/{skill_id}/state", response_model=SkillState)
async def update_skill_state(
    skill_id: str, data: SkillStateUpdate, ctx: SharedContext = Depends(get_context)
) -> SkillState:
    """Enable/disable a skill or change its invocation mode."""
    try:
        if data.enabled is True:
            await ctx.registry.enable_skill(skill_id)
        elif data.enabled is False:
            await ctx.registry.disable_skill(skill_id)
        if data.invocation_mode is not None:
            await ctx.registry.set_invocation_mode(skill_id, data.invocation_mode)
    except SkillNotFoundError:
        raise HTTPException(status_code=404, detail=f"Skill not found: {skill_id}")

    state = ctx.registry.get_skill_state(skill_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Skill not found: {skill_id}")
    return state


@router.post("/{skill_name}/scripts/run", response_model=ScriptResult)
async def run_script(
    skill_name: str, data: ScriptRunRequest, ctx: SharedContext = Depends(get_context)
) -> ScriptResult:
    """Run a skill script. Policy rejections come back with ok=false."""
    return await ctx.dispatcher.execute(skill_name, data.script, data.args)
