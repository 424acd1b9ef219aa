"""CLI interface for skillbox using Typer."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from skillbox.cli.server import serve_command
from skillbox.cli.skills import skills_app
from skillbox.utils.config import DEFAULT_WORKSPACE, Config

app = typer.Typer(
    name="skillbox",
    help="skillbox: discover agent skills and run their scripts",
    no_args_is_help=True,
    add_completion=True,
)
app.add_typer(skills_app, name="skills")

console = Console()


# Global config option callback
def load_config_callback(ctx: typer.Context, workspace: str):
    """Load configuration and store it in the context."""
    workspace_path = Path(workspace).expanduser()

    try:
        cfg = Config.load(workspace_path)
    except Exception as e:
        console.print(f"[red]Error loading config: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    return workspace


@app.callback()
def main(
    ctx: typer.Context,
    workspace: str = typer.Option(
        str(DEFAULT_WORKSPACE),
        "--workspace",
        "-w",
        help="Path to workspace directory",
        callback=load_config_callback,
    ),
    project: Annotated[
        Path | None,
        typer.Option(
            "--project",
            "-p",
            help="Directory with project-level skills (overrides config)",
        ),
    ] = None,
) -> None:
    """
    skillbox: discover agent skills and run their scripts.

    Configuration is loaded from ~/.skillbox/ by default.
    Use --workspace to specify a custom workspace directory.
    """
    if project is not None:
        ctx.obj["config"].project_skills_path = project.expanduser().absolute()


@app.command("serve")
def serve(
    ctx: typer.Context,
) -> None:
    """Start the HTTP API for the skill registry."""
    serve_command(ctx)


if __name__ == "__main__":
    app()
