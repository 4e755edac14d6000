"""
Pytest configuration and common fixtures for rediskv tests.

Store-level tests run against an in-memory ``fakeredis`` server; failure paths
use ``AsyncMock`` handles so specific redis-py exceptions can be injected.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest
import pytest_asyncio
from fakeredis import aioredis as fake_aioredis

from rediskv.core.config.settings import RedisConfig
from rediskv.core.logging.context import clear_request_context
from rediskv.persistence.redis.redis_client import ClientState, RedisClient


@pytest.fixture
def redis_config() -> RedisConfig:
    """Connection parameters pointing at a test database."""
    return RedisConfig(host="localhost", port="6379", db=15, connection_timeout=1.0)


@pytest.fixture
def fake_redis() -> fake_aioredis.FakeRedis:
    """Fresh in-memory Redis, isolated per test."""
    return fake_aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest_asyncio.fixture
async def kv(
    redis_config: RedisConfig, fake_redis: fake_aioredis.FakeRedis
) -> AsyncGenerator[RedisClient, None]:
    """Connected facade over the fake store."""
    client = await RedisClient.connect(redis_config, redis=fake_redis)
    yield client
    if client.state is not ClientState.CLOSED:
        await client.close()


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio.Redis handle for failure injection."""
    mock = MagicMock()
    mock.ping = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.incr = AsyncMock(return_value=1)
    mock.lpush = AsyncMock(return_value=1)
    mock.aclose = AsyncMock()
    return mock


@pytest_asyncio.fixture
async def mock_kv(redis_config: RedisConfig, mock_redis) -> RedisClient:
    """Connected facade over the mock handle."""
    return await RedisClient.connect(redis_config, redis=mock_redis)


@pytest.fixture(autouse=True)
def reset_request_context():
    """Keep request context from leaking between tests."""
    clear_request_context()
    yield
    clear_request_context()
