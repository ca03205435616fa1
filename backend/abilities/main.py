from fastapi import FastAPI

from abilities import __version__
from abilities.middleware.exceptions import register_exception_handlers
from abilities.routers import abilities


def register_abilities(app: FastAPI, prefix: str = "/api/abilities") -> FastAPI:
    """Install the ability error handlers and introspection router on a host app."""
    register_exception_handlers(app)
    app.include_router(abilities.router, prefix=prefix, tags=["abilities"])
    return app


def create_app() -> FastAPI:
    app = FastAPI(
        title="Abilities",
        description="Ability-based authorization for FastAPI applications",
        version=__version__,
    )
    return register_abilities(app)


app = create_app()
