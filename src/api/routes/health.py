"""Health check routes."""

from fastapi import APIRouter
from loguru import logger

from src.connections.postgres import get_postgres
from src.connections.redis import get_redis

health_log = logger.bind(module="Health")

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health() -> dict:
    """Health check endpoint with backing store status."""
    checks = {}
    for name, connect in (("postgres", get_postgres), ("redis", get_redis)):
        try:
            connection = await connect()
            checks[name] = await connection.healthcheck()
        except Exception as e:
            health_log.warning(f"{name} unavailable: {e}")
            checks[name] = False

    return {"status": checks["postgres"], "checks": checks}
