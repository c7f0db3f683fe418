import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidtube.config import get_settings
from vidtube.errors import register_exception_handlers
from vidtube.middleware import LoggingMiddleware
from vidtube.routers import comments, likes, playlists, subscriptions, users, videos

settings = get_settings()

log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)  # LoggingMiddleware covers requests

if settings.log_sql:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
else:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting VidTube API server...")
    logger.info(f"Environment: {'Development' if settings.is_default_secret else 'Production'}")
    logger.info(
        f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}"
    )
    if not settings.cloudinary_cloud_name:
        logger.warning("Cloudinary is not configured; uploads will fail")
    logger.info(f"API prefix: {settings.api_prefix}")
    yield
    logger.info("Shutting down server...")


app = FastAPI(title="VidTube API", version="0.1.0", root_path=settings.root_path, lifespan=lifespan)

# Logging first so every request is recorded
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
app.include_router(videos.router, prefix=f"{settings.api_prefix}/videos", tags=["videos"])
app.include_router(comments.router, prefix=f"{settings.api_prefix}/comments", tags=["comments"])
app.include_router(likes.router, prefix=f"{settings.api_prefix}/likes", tags=["likes"])
app.include_router(subscriptions.router, prefix=f"{settings.api_prefix}/subscriptions", tags=["subscriptions"])
app.include_router(playlists.router, prefix=f"{settings.api_prefix}/playlists", tags=["playlists"])


@app.get("/health")
def health():
    return {"status": "ok"}
