"""Redis pub/sub broadcaster for live bus position updates."""

import asyncio
import logging

import orjson
import redis.asyncio as aioredis

from bus_tracker.config import settings

logger = logging.getLogger(__name__)

CHANNEL = "bus:locations"
STATE_KEY = "bus:state"  # hash: bus_id -> latest position payload


class Broadcaster:
    """Publishes bus positions to Redis and manages WebSocket subscribers."""

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        self._subscribers: set[asyncio.Queue] = set()

    async def connect(self) -> None:
        self._redis = aioredis.from_url(settings.redis_url, decode_responses=False)

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()

    async def publish(self, bus_data: dict) -> None:
        """Store a bus position in Redis and fan it out to WebSocket subscribers."""
        payload = orjson.dumps({"type": "update", "buses": [bus_data]})

        if self._redis:
            try:
                await self._redis.hset(STATE_KEY, str(bus_data["id"]), orjson.dumps(bus_data))
                await self._redis.publish(CHANNEL, payload)
            except Exception:
                logger.exception("Failed to publish to Redis")

        dead = set()
        for q in self._subscribers:
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                dead.add(q)
        self._subscribers -= dead

    async def forget(self, bus_id: int) -> None:
        """Drop a bus from the live state (end of shift, deletion)."""
        if self._redis:
            try:
                await self._redis.hdel(STATE_KEY, str(bus_id))
            except Exception:
                logger.exception("Failed to remove bus %s from Redis state", bus_id)

    async def get_current_state(self) -> list[dict]:
        """Latest known position of every live bus."""
        if self._redis:
            try:
                raw = await self._redis.hvals(STATE_KEY)
                return [orjson.loads(v) for v in raw]
            except Exception:
                logger.exception("Failed to get state from Redis")
        return []

    def subscribe(self) -> asyncio.Queue:
        """Create a new subscriber queue for WebSocket fan-out."""
        q: asyncio.Queue = asyncio.Queue(maxsize=10)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)
