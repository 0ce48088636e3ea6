"""
GIDE Coding Agent - FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import config, context, conversation, diagnostics, messages, suggestions
from .services.config_manager import ConfigManager, check_configuration_status
from .services.runtime import AgentRuntime

LOG_LEVEL_ENV = "GIDE_LOG_LEVEL"

logger = logging.getLogger("gide_agent")


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(runtime: AgentRuntime | None = None) -> FastAPI:
    """Build the application; pass a runtime to control its configuration (tests do)"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - startup and shutdown logic"""
        logger.info("[Backend] Starting GIDE Coding Agent...")
        if getattr(app.state, "runtime", None) is None:
            app.state.runtime = AgentRuntime()
        await app.state.runtime.start()

        status = check_configuration_status()
        if not status["isValid"] and app.state.runtime.client is None:
            logger.warning("[Backend] Missing environment variables: %s", ", ".join(status["missingVars"]))
        for warning in status["warnings"]:
            logger.info("[Backend] %s", warning)

        yield
        logger.info("[Backend] Shutting down GIDE Coding Agent...")
        await app.state.runtime.close()

    app = FastAPI(
        title="GIDE Coding Agent",
        description="Editor-side bridge between the IDE and a remote AI coding agent",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    # The webview and extension host run locally
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(conversation.router, prefix="/api/conversation", tags=["conversation"])
    app.include_router(context.router, prefix="/api/context", tags=["context"])
    app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])
    app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
    app.include_router(config.router, prefix="/api/config", tags=["config"])
    app.include_router(diagnostics.router, prefix="/api/errors", tags=["errors"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "gide-coding-agent"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    configure_logging()
    server = ConfigManager().get("server") or {}
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=int(server.get("port", 8000)))


if __name__ == "__main__":
    run()
