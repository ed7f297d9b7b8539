"""
FastAPI application for the token lifecycle service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tokenauth.api.auth import router as auth_router
from tokenauth.api.handlers import (
    auth_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from tokenauth.config import AuthConfig
from tokenauth.dependencies import AuthComponents, build_components
from tokenauth.exceptions import AuthException

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(
    config: AuthConfig | None = None,
    components: AuthComponents | None = None,
) -> FastAPI:
    config = config or (components.config if components else AuthConfig())
    # Validate configuration on startup
    config.validate()
    components = components or build_components(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown."""
        logger.info("Auth service starting (store=%s, environment=%s)", config.AUTH_STORE, config.ENVIRONMENT)
        yield
        logger.info("Auth service shutting down")

    app = FastAPI(
        title="Token Auth API",
        description="Access, refresh and email-verification token lifecycle",
        lifespan=lifespan,
    )
    app.state.auth = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthException, auth_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])

    @app.get("/health")
    async def health():
        """Health check."""
        return {"status": "healthy"}

    return app


def main() -> None:
    import uvicorn

    config = AuthConfig()
    configure_logging(config.LOG_LEVEL)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
