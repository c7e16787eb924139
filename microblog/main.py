import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
import httpx
import uvicorn

from microblog import __version__
from microblog.core.config import settings
from microblog.core.database import init_db
from microblog.core.errors import ActivityPubError
from microblog.api.v1.api import api_router
from microblog.core.activitypub import activitypub_router, well_known_router
from microblog.core.activitypub.federation import FederationClient

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="ActivityPub federation for a single-account microblog",
    version=__version__,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    default_response_class=ORJSONResponse,
)

# CORS settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Enable gzip compression for large responses
app.add_middleware(GZipMiddleware, minimum_size=500)

@app.exception_handler(ActivityPubError)
async def activitypub_error_handler(request: Request, exc: ActivityPubError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return ORJSONResponse({"error": exc.message}, status_code=exc.status_code)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_STR)

# Include ActivityPub routes
app.include_router(well_known_router, prefix="/.well-known", tags=["discovery"])
app.include_router(activitypub_router, prefix=settings.ACTIVITYPUB_PREFIX, tags=["activitypub"])

@app.on_event("startup")
async def startup_event():
    """Initialize resources on application startup"""
    await init_db()
    # Shared client for remote actor lookups and deliveries, with bounded timeouts
    FederationClient.set_shared_client(
        httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(settings.FEDERATION_TIMEOUT),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            headers={"User-Agent": settings.FEDERATION_USER_AGENT},
        )
    )

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup resources on application shutdown"""
    client = FederationClient.shared_client
    if client is not None:
        await client.aclose()
    FederationClient.set_shared_client(None)

@app.get("/")
async def root():
    """Root path"""
    return {"message": settings.PROJECT_NAME}

if __name__ == "__main__":
    uvicorn.run(
        "microblog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
