import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docflow.config import settings
from docflow.database import Base, engine
from docflow.exception_handlers import register_exception_handlers
from docflow.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from docflow.middleware.rate_limit import configure_rate_limiting
from docflow.middleware.subdomain import SubdomainMiddleware
from docflow.routes import auth, documents, organizations, public, users

setup_structured_logging(log_level=settings.log_level, json_format=settings.json_logs)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info("Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment)
    if settings.debug:
        # Outside debug the schema is owned by alembic
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")
    yield
    await engine.dispose()
    logger.info("Shutting down the application...")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant documentation platform",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SubdomainMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    configure_rate_limiting(app)
    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": settings.app_version}

    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(documents.router, prefix="/documents", tags=["Documents"])
    app.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
    app.include_router(public.router, tags=["Public site"])

    if settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
