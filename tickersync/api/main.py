"""FastAPI application exposing the identity and audit engine."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tickersync.core.config import settings
from tickersync.core.container import get_container, reset_container
from tickersync.core.redis import close_redis
import logging
import time
import sys

# Import routers
from tickersync.api.routes import health, audit, tickers, categories

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ticker Sync API", version="1.0.0")


@app.on_event("startup")
async def startup_event():
    """Load every repository before serving."""
    logger.info("Application starting up...")
    container = await get_container()
    logger.info(
        f"✓ Loaded {container.pair_repo.size()} pairs, "
        f"{container.ticker_repo.size()} tickers, "
        f"{container.alert_repo.size()} alert groups"
    )
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending writes and remote deletions."""
    logger.info("Application shutting down...")
    try:
        container = await get_container()
        await container.alerts.drain()
        written = await container.save()
        logger.info(f"✓ Flushed {written} repositories")
    except Exception as e:
        logger.error(f"✗ Failed to flush repositories: {e}", exc_info=True)
    finally:
        reset_container()
        await close_redis()


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    start_time = time.time()
    
    logger.info(f"→ {request.method} {request.url.path}")
    logger.debug(f"  Query params: {dict(request.query_params)}")
    
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"← {request.method} {request.url.path} - ERROR after {process_time:.3f}s: {str(e)}")
        raise


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and ensure CORS headers are sent."""
    logger.error(f"Unhandled exception in {request.method} {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}", exc_info=True)
    
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.log_level == "DEBUG" else "Internal server error"
        },
        headers={
            "Access-Control-Allow-Origin": request.headers.get("origin", "*"),
            "Access-Control-Allow-Credentials": "true",
        }
    )

# Configure CORS
logger.info(f"Configuring CORS with origins: {settings.cors_origins_list}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router)
app.include_router(audit.router)
app.include_router(tickers.router)
app.include_router(categories.router)


@app.get("/")
async def root():
    """Service banner."""
    return {"status": "ok", "service": "tickersync-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.backend_port)
