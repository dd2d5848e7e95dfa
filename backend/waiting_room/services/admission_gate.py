import logging
import time

from waiting_room.core.store import OrderedScoreStore
from waiting_room.services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)


class AdmissionGateService:
    """
    Moves users from a queue's wait collection to its proceed collection and
    answers admission checks.

    promote() is the only path that writes to the proceed collection. By
    default it is two atomic store commands (pop, then insert). A crash
    between them loses the popped batch; this is accepted and not detected.
    With atomic=True both steps run in one server-side script instead.
    """

    def __init__(
        self,
        store: OrderedScoreStore,
        token_issuer: TokenIssuer,
        atomic: bool = False
    ):
        self.store = store
        self.token_issuer = token_issuer
        self.atomic = atomic

    async def promote(self, queue: str, max_count: int) -> int:
        """Moves up to max_count of the earliest waiting users into proceed. Returns how many moved."""
        if max_count <= 0:
            return 0

        wait_key = self.store.wait_key(queue)
        proceed_key = self.store.proceed_key(queue)

        if self.atomic:
            moved = await self.store.pop_min_into(wait_key, proceed_key, max_count, int(time.time()))
            return len(moved)

        popped = await self.store.pop_min(wait_key, max_count)
        for member, _score in popped:
            await self.store.add(proceed_key, member, int(time.time()))

        if popped:
            logger.debug(f"Moved {len(popped)} users from {queue} wait queue to proceed")
        return len(popped)

    async def is_admitted(self, queue: str, user_id: int) -> bool:
        rank = await self.store.rank(self.store.proceed_key(queue), str(user_id))
        return rank is not None

    async def check_admission_token(self, queue: str, user_id: int, token: str) -> bool:
        """
        True when the presented token is the one derived for (queue, user_id).

        This does not look at the proceed collection: holding the token is
        enough, whether or not the user was ever promoted.
        """
        return self.token_issuer.matches(queue, user_id, token)
