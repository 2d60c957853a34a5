"""FastAPI application entry point."""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before importing runtime config/services.
load_dotenv()

from .logging_config import setup_logging

setup_logging()

import logging

from .config import settings
from .routers import debate, viewer_gateway

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Debate Arena API",
    description="Live multi-persona debate with viewer chat",
    version="1.0.0",
)
app.state.orchestrator = None

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(debate.router)
app.include_router(viewer_gateway.router)

logger.info("=" * 80)
logger.info("FastAPI Application Started")
logger.info("CORS Origins: %s", settings.cors_origins)
logger.info("=" * 80)


@app.on_event("startup")
async def startup_event():
    """Load the arena configuration and build the orchestrator."""
    logger.info("=== Application startup initialization ===")

    from .services.arena_bootstrap import build_orchestrator
    from .services.arena_config_service import ArenaConfigService

    config = await ArenaConfigService(settings.arena_config_path).load_config()
    app.state.orchestrator = build_orchestrator(config)

    if settings.autostart_debate:
        logger.info("Autostart enabled, starting debate")
        await app.state.orchestrator.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the debate loops before the event loop closes."""
    orchestrator = app.state.orchestrator
    if orchestrator is not None:
        await orchestrator.shutdown()


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    orchestrator = app.state.orchestrator
    return {
        "status": "ok",
        "debate": orchestrator.status.value if orchestrator is not None else "uninitialized",
        "viewers_connected": orchestrator.publisher.subscriber_count if orchestrator is not None else 0,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Debate Arena API",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "/ws",
    }
