"""Skills subcommand group for skillbox CLI."""

import asyncio
from typing import Annotated, Any, Awaitable, Callable

import questionary
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from skillbox.core.context import SharedContext
from skillbox.core.exceptions import SkillNotFoundError
from skillbox.tools.terminal import ExecutionRequest

skills_app = typer.Typer(
    help="Manage skills and run their scripts",
    no_args_is_help=True,
    add_completion=True,
)
console = Console()


def _run(
    ctx: typer.Context,
    action: Callable[[SharedContext], Awaitable[Any]],
    **context_kwargs: Any,
) -> Any:
    """Build the shared context, initialize the registry and run action."""
    context = SharedContext(ctx.obj["config"], **context_kwargs)

    async def _main() -> Any:
        await context.registry.initialize()
        return await action(context)

    return asyncio.run(_main())


async def _confirm_execution(request: ExecutionRequest) -> bool:
    """Ask the user before a script runs for the first time."""
    answer = await questionary.confirm(
        f"Run '{request.command_line}' in {request.working_directory}?",
        default=False,
    ).ask_async()
    return bool(answer)


@skills_app.command("list")
def list_skills(ctx: typer.Context) -> None:
    """List all discovered skills."""

    async def action(context: SharedContext) -> None:
        registry = context.registry
        skills = registry.get_all_skills()

        console.print(Panel(f"Available Skills: {len(skills)}", border_style="cyan"))
        for skill in skills:
            state = registry.get_skill_state(skill.id)
            status = (
                "[green]enabled[/green]"
                if state and state.enabled
                else "[red]disabled[/red]"
            )
            mode = state.invocation_mode if state else "auto"
            console.print(
                f"\n[bold cyan]{escape(skill.id)}[/bold cyan] "
                f"({skill.location}) {status}, {mode}"
            )
            if skill.metadata.description:
                console.print(f"  {escape(skill.metadata.description)}")
            if skill.scripts:
                names = ", ".join(s.name for s in skill.scripts)
                console.print(f"  Scripts: {escape(names)}")

        for error in registry.get_discovery_errors():
            console.print(
                f"[yellow]Skipped {escape(str(error.path))}: "
                f"{escape(error.message)}[/yellow]"
            )

    _run(ctx, action)


@skills_app.command()
def info(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="ID of the skill"),
) -> None:
    """Show detailed information about a skill."""

    async def action(context: SharedContext) -> bool:
        registry = context.registry
        skill = registry.get_skill(skill_id)
        if skill is None:
            console.print(f"[red]Skill not found: {escape(skill_id)}[/red]")
            console.print("\nAvailable skills:")
            for s in registry.get_all_skills():
                console.print(f"  - {escape(s.id)}")
            return False

        state = registry.get_skill_state(skill.id)
        console.print(
            Panel(f"Skill: {escape(skill.metadata.name)}", border_style="cyan")
        )
        console.print(f"ID: {escape(skill.id)}")
        console.print(f"Description: {escape(skill.metadata.description or 'N/A')}")
        console.print(f"Location: {skill.location} ({escape(str(skill.folder_path))})")
        if state:
            console.print(
                f"Enabled: {state.enabled}, mode: {state.invocation_mode}, "
                f"last used: {state.last_used or 'never'}"
            )

        console.print("\nScripts:")
        if skill.scripts:
            for script in skill.scripts:
                interpreter = script.interpreter or "[red]unsupported[/red]"
                console.print(
                    f"  [bold]{escape(script.relative_path)}[/bold] ({interpreter})"
                )
                if script.description:
                    console.print(f"    {escape(script.description)}")
        else:
            console.print("  No scripts")

        if skill.references:
            console.print("\nReferences:")
            for ref in skill.references:
                console.print(f"  {escape(ref)}")
        return True

    if not _run(ctx, action):
        raise typer.Exit(1)


def _mutate(
    ctx: typer.Context,
    mutation: Callable[[SharedContext], Awaitable[Any]],
    done: str,
) -> None:
    async def action(context: SharedContext) -> bool:
        try:
            await mutation(context)
        except (SkillNotFoundError, ValueError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            return False
        return True

    if not _run(ctx, action):
        raise typer.Exit(1)
    console.print(f"[green]{escape(done)}[/green]")


@skills_app.command()
def enable(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="ID of the skill"),
) -> None:
    """Enable a skill."""
    _mutate(
        ctx,
        lambda context: context.registry.enable_skill(skill_id),
        f"Enabled {skill_id}",
    )


@skills_app.command()
def disable(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="ID of the skill"),
) -> None:
    """Disable a skill."""
    _mutate(
        ctx,
        lambda context: context.registry.disable_skill(skill_id),
        f"Disabled {skill_id}",
    )


@skills_app.command()
def toggle(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="ID of the skill"),
) -> None:
    """Flip a skill between enabled and disabled."""
    _mutate(
        ctx,
        lambda context: context.registry.toggle_skill(skill_id),
        f"Toggled {skill_id}",
    )


@skills_app.command()
def mode(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="ID of the skill"),
    invocation_mode: str = typer.Argument(..., help="auto or manual"),
) -> None:
    """Set whether a skill is invoked automatically or only on request."""
    _mutate(
        ctx,
        lambda context: context.registry.set_invocation_mode(
            skill_id, invocation_mode  # type: ignore[arg-type]
        ),
        f"{skill_id} is now {invocation_mode}",
    )


@skills_app.command(context_settings={"ignore_unknown_options": True})
def run(
    ctx: typer.Context,
    skill_name: str = typer.Argument(..., help="Name of the skill"),
    script: str = typer.Argument(..., help="Script file name or relative path"),
    args: Annotated[
        list[str] | None,
        typer.Argument(
            help="Arguments passed to the script. Put them after -- if one of "
            "them is --yes, -y or --help."
        ),
    ] = None,
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Run without asking for approval"
    ),
) -> None:
    """Run a skill script under the configured script policy.

    Options the command does not know, like --env, are passed to the script.
    """

    async def action(context: SharedContext):
        return await context.dispatcher.execute(skill_name, script, args or [])

    approver = (lambda request: True) if yes else _confirm_execution
    result = _run(ctx, action, approver=approver)

    if result.ok:
        console.print(result.message, markup=False, highlight=False)
    else:
        console.print(result.message, style="red", markup=False, highlight=False)
        raise typer.Exit(1)
