import logging
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from storefront.api import category_routes, product_routes
from storefront.core.config import settings
from storefront.database import Base, engine
from storefront.services.listing_cache import get_redis_client

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


def mask_url_password(url: str) -> str:
    """Mask password in URL for logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            return url.replace(f":{parsed.password}@", ":****@")
        return url
    except ValueError:
        return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info(f"Connected to database: {mask_url_password(settings.DATABASE_URL)}")
        Base.metadata.create_all(bind=engine)
    except OperationalError as e:
        logger.warning(f"Database connection failed: {e}")

    redis_client = get_redis_client()
    if redis_client is None:
        logger.info("REDIS_URL not set, listing cache disabled")
    else:
        try:
            redis_client.ping()
            logger.info(f"Connected to Redis: {mask_url_password(settings.REDIS_URL)}")
        except Exception as e:
            logger.warning(f"Redis connection failed, listings will not be cached: {e}")
        finally:
            redis_client.close()

    yield


app = FastAPI(title="storefront", lifespan=lifespan)

app.include_router(product_routes.router)
app.include_router(category_routes.router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
