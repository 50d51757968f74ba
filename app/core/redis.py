import redis.asyncio as redis
from app.core.config import settings
import structlog

logger = structlog.get_logger()

# One client per process; the connection pool is shared by every request.
redis_client: redis.Redis = redis.from_url(settings.redis_url, decode_responses=True)


async def check_redis() -> bool:
    return bool(await redis_client.ping())


async def close_redis():
    logger.info("Closing Redis connection pool")
    await redis_client.aclose()
