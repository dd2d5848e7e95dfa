"""
Redis sorted-set adapter for the waiting room.

Each queue owns two sorted sets:
- users:queue:<queue>:wait     (member = user id, score = arrival unix seconds)
- users:queue:<queue>:proceed  (member = user id, score = admission unix seconds)

Queue names must not contain ":"; discovery reads the name back as the
third colon-delimited segment of the wait key.

Every method maps to a single Redis command, so each call is atomic on its
own. Nothing here groups commands into transactions except
pop_min_into(), which runs as one Lua script.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from waiting_room.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class OrderedScoreStore:
    """
    Async client for the ordered-score collections behind every queue.
    Connection and timeout failures surface as StoreUnavailableError.
    """

    # Key layout
    PREFIX = "users:queue"
    WAIT_SUFFIX = "wait"
    PROCEED_SUFFIX = "proceed"

    # Pops up to ARGV[1] lowest members from KEYS[1] and adds them to KEYS[2]
    # with score ARGV[2]. Returns the moved members.
    POP_MIN_INTO_SCRIPT = """
    local popped = redis.call("zpopmin", KEYS[1], ARGV[1])
    local moved = {}
    for i = 1, #popped, 2 do
        redis.call("zadd", KEYS[2], ARGV[2], popped[i])
        table.insert(moved, popped[i])
    end
    return moved
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        socket_timeout: float = 5,
        client: Optional[redis.Redis] = None
    ):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self._redis: Optional[redis.Redis] = client
        self._connected = client is not None

    async def connect(self) -> bool:
        """
        Initialize the Redis connection.
        Returns True if the server answered a ping, False otherwise.
        """
        if self._connected:
            return True

        try:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=self.socket_timeout,
                socket_timeout=self.socket_timeout
            )
            await self._redis.ping()
            self._connected = True
            logger.info(f"Connected to Redis at {self.redis_url}")
            return True
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            logger.warning(f"Redis connection failed: {e}. Queue operations will fail until it is reachable.")
            self._connected = False
            return False

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.close()
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    # ==================== Keys ====================

    def _make_key(self, queue: str, suffix: str) -> str:
        return f"{self.PREFIX}:{queue}:{suffix}"

    def wait_key(self, queue: str) -> str:
        return self._make_key(queue, self.WAIT_SUFFIX)

    def proceed_key(self, queue: str) -> str:
        return self._make_key(queue, self.PROCEED_SUFFIX)

    def wait_key_pattern(self) -> str:
        return self._make_key("*", self.WAIT_SUFFIX)

    @staticmethod
    def queue_from_key(key: str) -> str:
        """Extract the queue name (third colon-delimited segment) from a collection key."""
        return key.split(":")[2]

    # ==================== Commands ====================

    @asynccontextmanager
    async def _command(self, name: str, key: str):
        if self._redis is None:
            raise StoreUnavailableError("Queue store is not connected.")
        try:
            yield self._redis
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.warning(f"Redis {name} failed for {key}: {e}")
            raise StoreUnavailableError(f"Queue store is unavailable: {e}") from e

    async def add_if_absent(self, key: str, member: str, score: float) -> bool:
        """ZADD NX. Returns False when the member was already present."""
        async with self._command("zadd", key) as client:
            added = await client.zadd(key, {member: score}, nx=True)
        return added > 0

    async def add(self, key: str, member: str, score: float) -> None:
        """ZADD, overwriting the score of an existing member."""
        async with self._command("zadd", key) as client:
            await client.zadd(key, {member: score})

    async def rank(self, key: str, member: str) -> Optional[int]:
        """0-based rank by ascending score, or None when absent."""
        async with self._command("zrank", key) as client:
            return await client.zrank(key, member)

    async def pop_min(self, key: str, count: int) -> List[Tuple[str, float]]:
        """Atomically remove and return up to `count` lowest-scored members."""
        if count <= 0:
            return []
        async with self._command("zpopmin", key) as client:
            return await client.zpopmin(key, count)

    async def pop_min_into(self, source: str, destination: str, count: int, score: float) -> List[str]:
        """Move up to `count` lowest-scored members from source to destination in one script."""
        if count <= 0:
            return []
        async with self._command("eval", source) as client:
            moved = await client.eval(self.POP_MIN_INTO_SCRIPT, 2, source, destination, count, score)
        return list(moved or [])

    async def scan_keys(self, pattern: str, count: int = 100) -> List[str]:
        """Enumerate keys matching a glob pattern with SCAN."""
        async with self._command("scan", pattern) as client:
            keys = []
            async for key in client.scan_iter(match=pattern, count=count):
                keys.append(key)
            return keys

    async def ping(self) -> bool:
        async with self._command("ping", "-") as client:
            return bool(await client.ping())
