"""
Ketometer Analysis Service - Main Entry Point

Keto compatibility analysis of foods, dishes and restaurant menus.
"""
import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ketometer import __version__
from ketometer.core.config import settings
from ketometer.core.logger import logger
from ketometer.core.limiter import limiter, ROOT_LIMIT
from ketometer.routes import analysis


# Validate configuration on startup
try:
    settings.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


# Create FastAPI app
app = FastAPI(
    title="Ketometer Analysis Service",
    description="AI-powered keto compatibility analysis for foods, dishes and menus",
    version=__version__
)

# Attach rate limiter and its error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# The mobile client calls from any origin; preflight is answered permissively
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-ketometer-key"],
)

app.include_router(analysis.router, tags=["Analysis"])


@app.get("/")
@limiter.limit(ROOT_LIMIT)
def root(request: Request):
    """Health check endpoint."""
    return {"message": "Ketometer Analysis Service running"}


@app.get("/health")
def health():
    """
    Detailed health status.
    Returns 'degraded' if required environment variables are missing.
    """
    required_vars = ["OPENAI_API_KEY"]
    missing = [v for v in required_vars if not os.environ.get(v)]

    if missing:
        return JSONResponse(
            status_code=200,
            content={
                "status": "degraded",
                "service": "ketometer-analysis",
                "version": __version__,
                "missing_config": missing,
                "message": f"Missing required environment variables: {', '.join(missing)}"
            }
        )

    return {
        "status": "healthy",
        "service": "ketometer-analysis",
        "version": __version__
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ketometer.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False  # Never use reload=True in production (disables multi-threading)
    )
