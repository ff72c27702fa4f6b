"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI

from tvmcalc import __version__
from tvmcalc.config import get_settings
from tvmcalc.logging_config import configure_logging
from tvmcalc.api import router as api_router

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Time value of money solver for calculator widgets",
    version=__version__,
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}


def run():
    """Run the development server."""
    import uvicorn

    logger.info("Starting %s on %s:%d", settings.app_name, settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
