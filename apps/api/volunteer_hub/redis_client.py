from __future__ import annotations

from redis import Redis
from redis.connection import ConnectionPool

from volunteer_hub.core.config import settings

# Rate-limit checks sit on the request path; never wait long on Redis.
SOCKET_TIMEOUT_SECONDS = 0.5

_pool: ConnectionPool | None = None


def get_redis() -> Redis:
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        )
    return Redis(connection_pool=_pool)
