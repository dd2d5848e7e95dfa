import fnmatch
import os

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

os.environ.setdefault("TESTING", "true")

from waiting_room.core.store import OrderedScoreStore
from waiting_room.main import app, build_services
from waiting_room.services.admission_gate import AdmissionGateService
from waiting_room.services.token_issuer import TokenIssuer
from waiting_room.services.wait_queue import WaitQueueService


class FakeSortedSetRedis:
    """
    In-memory stand-in for the redis.asyncio client, covering the sorted-set
    commands the store uses. Members sort by (score, member) like Redis.
    Commands listed in `failing` raise a redis ConnectionError.
    """

    def __init__(self):
        self.data = {}
        self.failing = set()
        self.closed = False

    def _check(self, command):
        if command in self.failing:
            raise RedisConnectionError(f"{command}: connection refused")

    def _ordered(self, key):
        return sorted(self.data.get(key, {}).items(), key=lambda item: (item[1], item[0]))

    async def ping(self):
        self._check("ping")
        return True

    async def close(self):
        self.closed = True

    async def zadd(self, key, mapping, nx=False):
        self._check("zadd")
        zset = self.data.setdefault(key, {})
        added = 0
        for member, score in mapping.items():
            if member in zset:
                if not nx:
                    zset[member] = float(score)
                continue
            zset[member] = float(score)
            added += 1
        return added

    async def zrank(self, key, member):
        self._check("zrank")
        for index, (name, _score) in enumerate(self._ordered(key)):
            if name == member:
                return index
        return None

    async def zpopmin(self, key, count=None):
        self._check("zpopmin")
        popped = self._ordered(key)[: count or 1]
        for member, _score in popped:
            del self.data[key][member]
        if key in self.data and not self.data[key]:
            del self.data[key]
        return popped

    async def eval(self, script, numkeys, source, destination, count, score):
        self._check("eval")
        popped = await self.zpopmin(source, int(count))
        zset = self.data.setdefault(destination, {})
        for member, _score in popped:
            zset[member] = float(score)
        return [member for member, _score in popped]

    async def scan_iter(self, match=None, count=None):
        self._check("scan")
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key


@pytest.fixture
def fake_redis():
    return FakeSortedSetRedis()


@pytest.fixture
def store(fake_redis):
    return OrderedScoreStore(client=fake_redis)


@pytest.fixture
def token_issuer():
    return TokenIssuer()


@pytest.fixture
def wait_queue(store):
    return WaitQueueService(store)


@pytest.fixture
def admission_gate(store, token_issuer):
    return AdmissionGateService(store, token_issuer)


@pytest.fixture
async def client(store):
    build_services(store)

    # Disable rate limiter for tests
    app.state.limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.state.limiter.enabled = True
