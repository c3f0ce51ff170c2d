from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from structlog import get_logger

from property_listing.config import settings
from property_listing.context import build_context
from property_listing.core.errors import InfrastructureError, ServiceError
from property_listing.core.logging import setup_logging
from property_listing.routers import favorites, properties, recommendations

logger = get_logger()

app = FastAPI(title="Property Listing Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(properties.router)
app.include_router(favorites.router)
app.include_router(recommendations.router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if isinstance(exc, InfrastructureError):
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
async def startup_event():
    setup_logging()
    # Tests install their own context before the app is exercised
    if getattr(app.state, "context", None) is None:
        app.state.context = await build_context(settings)
    logger.info("service_started")


@app.on_event("shutdown")
async def shutdown_event():
    context = getattr(app.state, "context", None)
    if context is not None:
        await context.close()


@app.get("/health", tags=["health"])
async def health(request: Request):
    details = {"status": "ok"}
    context = request.app.state.context
    try:
        details["property_count"] = await context.properties.count()
        details["database"] = "up"
    except InfrastructureError as e:
        details["status"] = "degraded"
        details["database"] = f"down: {e.message}"
    # cache state never degrades status
    details["cache"] = "up" if await context.cache.ping() else "disabled"
    details["config"] = {
        "db_url_set": bool(context.settings.DATABASE_URL),
        "redis_url_set": bool(context.settings.REDIS_URL),
    }
    return details
