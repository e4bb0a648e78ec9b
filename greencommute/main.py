"""
GreenCommute Route Planning API - Entry Point

This module initializes the FastAPI application with configuration
validation and provider checks on startup.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import load_config, ConfigurationError
from .processing.pipeline import CommuteRoutePipeline
from .api.routes import router, set_pipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown."""
    # Startup
    logger.info("=" * 60)
    logger.info("GREENCOMMUTE ROUTE PLANNING API - STARTING")
    logger.info("=" * 60)

    try:
        # Load configuration (will fail fast if env vars missing)
        config = load_config()
        logger.info("Configuration loaded successfully")

        # Unconfigured providers fall back to synthetic data
        api_status = config.validate_apis()
        for api, available in api_status.items():
            status = "CONFIGURED" if available else "NOT CONFIGURED (fallback)"
            logger.info(f"  {api}: {status}")

        pipeline = CommuteRoutePipeline.from_config(config)
        set_pipeline(pipeline)
        logger.info("Pipeline initialized")

        logger.info("Testing provider connectivity...")
        test_results = await pipeline.test_all_apis()
        for api, ok in test_results.items():
            status = "OK" if ok else "UNAVAILABLE"
            logger.info(f"  {api}: {status}")

        if not test_results.get("google_directions"):
            logger.warning("Directions provider is not responding - synthetic routes will be served.")

        logger.info("=" * 60)
        logger.info(f"Server ready on {config.backend_host}:{config.backend_port}")
        logger.info("=" * 60)

        # Store config and pipeline in app state
        app.state.config = config
        app.state.pipeline = pipeline

        yield

    except ConfigurationError as e:
        logger.error("=" * 60)
        logger.error("CONFIGURATION ERROR")
        logger.error("=" * 60)
        logger.error(str(e))
        logger.error("")
        logger.error("Please ensure all required environment variables are set.")
        logger.error("See .env.example for required variables.")
        logger.error("=" * 60)
        sys.exit(1)

    # Shutdown
    logger.info("Shutting down...")
    if hasattr(app.state, "pipeline"):
        await app.state.pipeline.close()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Load config early to get CORS origins (will fail if config is invalid)
    try:
        config = load_config()
    except ConfigurationError:
        # Let lifespan handle the error with better messaging
        config = None

    app = FastAPI(
        title="GreenCommute Route Planning API",
        description="Hazard-aware, emissions-aware commute route recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins if config else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Load config to get port
    config = load_config()

    uvicorn.run(
        "greencommute.main:app",
        host=config.backend_host,
        port=config.backend_port,
        reload=False,
    )
