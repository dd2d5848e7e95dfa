import logging
import time

from waiting_room.core.store import OrderedScoreStore
from waiting_room.exceptions import AlreadyRegisteredError

logger = logging.getLogger(__name__)

# Rank returned for users that are not in the wait collection: never
# registered, or already promoted. Use AdmissionGate.is_admitted to tell apart.
NOT_WAITING = -1


class WaitQueueService:
    def __init__(self, store: OrderedScoreStore):
        self.store = store

    async def register(self, queue: str, user_id: int) -> int:
        """
        Adds the user to the queue's wait collection, scored by the current
        unix second, and returns its 1-based rank.

        Raises AlreadyRegisteredError if the user is already waiting.
        Returns NOT_WAITING if the user was promoted between the insert and
        the rank lookup; the caller should query the rank again.
        """
        key = self.store.wait_key(queue)
        added = await self.store.add_if_absent(key, str(user_id), int(time.time()))
        if not added:
            logger.info(f"User {user_id} already registered in {queue} queue")
            raise AlreadyRegisteredError(queue)

        rank = await self.store.rank(key, str(user_id))
        if rank is None:
            logger.debug(f"User {user_id} left {queue} wait queue before its rank was read")
            return NOT_WAITING

        logger.debug(f"Registered user {user_id} in {queue} queue at rank {rank + 1}")
        return rank + 1

    async def get_rank(self, queue: str, user_id: int) -> int:
        rank = await self.store.rank(self.store.wait_key(queue), str(user_id))
        return NOT_WAITING if rank is None else rank + 1
