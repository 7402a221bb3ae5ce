"""FastAPI application factory.

create_app() returns a configured FastAPI instance: lifespan, error
handlers, middleware and routers. The module-level ``app`` is what
uvicorn serves (fornecedores.main:app).
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fornecedores import __version__
from fornecedores.api import api_router
from fornecedores.config import settings
from fornecedores.errors import register_exception_handlers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "fornecedores.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("fornecedores.shutdown")

    from fornecedores.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Fornecedores API",
        description="Supplier registry with JWT authentication and claim-based authorization",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Starlette runs middleware in reverse order of registration:
    # RequestId → HTTPS redirect → Security → CORS → handler
    from fornecedores.middleware.request_id import RequestIdMiddleware
    from fornecedores.middleware.security import install_security

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_security(app, redirect_to_https=settings.redirect_to_https)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


app = create_app()
