"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from skillbox import __version__
from skillbox.api.routers import skills, tools
from skillbox.core.context import SharedContext


def create_app(context: SharedContext) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await context.registry.initialize()
        yield

    app = FastAPI(
        title="skillbox API",
        description="HTTP API for the skill registry and script dispatcher",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    app.include_router(skills.router, prefix="/skills", tags=["skills"])
    app.include_router(tools.router, prefix="/tools", tags=["tools"])

    return app
