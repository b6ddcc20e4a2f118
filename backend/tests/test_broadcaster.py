"""Tests for the Redis-backed live bus state."""

import asyncio

import orjson
from fakeredis import aioredis as fake_aioredis

from bus_tracker.core.broadcaster import Broadcaster


def make_broadcaster() -> Broadcaster:
    broadcaster = Broadcaster()
    broadcaster._redis = fake_aioredis.FakeRedis()
    return broadcaster


def test_publish_keeps_latest_position_per_bus():
    async def scenario():
        broadcaster = make_broadcaster()
        await broadcaster.publish({"id": 5, "lat": 13.0, "lng": 80.0})
        await broadcaster.publish({"id": 5, "lat": 13.2, "lng": 80.2})
        state = await broadcaster.get_current_state()
        await broadcaster.close()
        return state

    assert asyncio.run(scenario()) == [{"id": 5, "lat": 13.2, "lng": 80.2}]


def test_forget_removes_bus():
    async def scenario():
        broadcaster = make_broadcaster()
        await broadcaster.publish({"id": 5, "lat": 13.0, "lng": 80.0})
        await broadcaster.publish({"id": 6, "lat": 13.1, "lng": 80.1})
        await broadcaster.forget(5)
        await broadcaster.forget(42)  # unknown ids are ignored
        state = await broadcaster.get_current_state()
        await broadcaster.close()
        return state

    assert asyncio.run(scenario()) == [{"id": 6, "lat": 13.1, "lng": 80.1}]


def test_subscribers_receive_updates():
    async def scenario():
        broadcaster = make_broadcaster()
        queue = broadcaster.subscribe()
        await broadcaster.publish({"id": 5, "lat": 13.0, "lng": 80.0})
        message = queue.get_nowait()
        broadcaster.unsubscribe(queue)
        await broadcaster.close()
        return message

    message = orjson.loads(asyncio.run(scenario()))
    assert message == {"type": "update", "buses": [{"id": 5, "lat": 13.0, "lng": 80.0}]}


def test_without_redis_state_is_empty():
    broadcaster = Broadcaster()
    assert asyncio.run(broadcaster.get_current_state()) == []
