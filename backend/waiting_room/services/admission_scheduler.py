import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from waiting_room.core.config import SchedulerConfig
from waiting_room.core.store import OrderedScoreStore
from waiting_room.services.admission_gate import AdmissionGateService

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    promoted: Dict[str, int] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: bool = False

    @property
    def total_promoted(self) -> int:
        return sum(self.promoted.values())


class AdmissionSchedulerService:
    """
    Periodically promotes a fixed batch from every discoverable queue.

    One loop per process. The loop awaits each sweep before sleeping, so at
    most one sweep is in flight. Within a sweep each queue is promoted
    independently; a failure on one queue is logged and does not stop the
    others.
    """

    def __init__(
        self,
        store: OrderedScoreStore,
        admission_gate: AdmissionGateService,
        config: Optional[SchedulerConfig] = None
    ):
        self.store = store
        self.admission_gate = admission_gate
        self.config = config or SchedulerConfig()

        self._running = False
        self._sweeping = False
        self._task: Optional[asyncio.Task] = None

        self.cycle_count = 0
        self.promoted_count = 0
        self.error_count = 0
        self.last_error: Optional[str] = None
        self.last_sweep_at: Optional[float] = None

    @property
    def status(self) -> str:
        if not self._running:
            return "stopped"
        return "running" if self._sweeping else "idle"

    async def start(self):
        if self._task and not self._task.done():
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Admission Scheduler Task Started")

    async def stop(self):
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Admission Scheduler Task Stopped")

    async def _loop(self):
        await asyncio.sleep(self.config.initial_delay_seconds)
        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                self.error_count += 1
                self.last_error = str(e)
                logger.error(f"Error in admission scheduler loop: {e}")
            await asyncio.sleep(self.config.interval_seconds)

    async def discover_queues(self) -> List[str]:
        keys = await self.store.scan_keys(self.store.wait_key_pattern(), count=self.config.scan_count)
        # SCAN may return a key more than once
        queues = []
        for key in keys:
            queue = self.store.queue_from_key(key)
            if queue not in queues:
                queues.append(queue)
        return queues

    async def run_once(self) -> SweepResult:
        """Runs a single sweep over all discovered queues."""
        if not self.config.enabled:
            return SweepResult(skipped=True)

        self._sweeping = True
        try:
            return await self._sweep()
        finally:
            self._sweeping = False
            self.cycle_count += 1
            self.last_sweep_at = time.time()

    async def _sweep(self) -> SweepResult:
        result = SweepResult()
        batch_size = self.config.batch_size

        queues = await self.discover_queues()
        if not queues:
            return result

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def promote(queue: str) -> int:
            async with semaphore:
                return await self.admission_gate.promote(queue, batch_size)

        outcomes = await asyncio.gather(*(promote(q) for q in queues), return_exceptions=True)

        for queue, outcome in zip(queues, outcomes):
            if isinstance(outcome, BaseException):
                self.error_count += 1
                self.last_error = f"{queue}: {outcome}"
                result.failed[queue] = str(outcome)
                logger.error(f"Failed to promote members of {queue} queue: {outcome}")
                continue
            result.promoted[queue] = outcome
            self.promoted_count += outcome
            logger.info("Tried %d and allowed %d members of %s queue", batch_size, outcome, queue)

        return result

    def stats(self) -> dict:
        return {
            "status": self.status,
            "enabled": self.config.enabled,
            "batch_size": self.config.batch_size,
            "interval_seconds": self.config.interval_seconds,
            "cycle_count": self.cycle_count,
            "promoted_count": self.promoted_count,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "last_sweep_at": self.last_sweep_at,
        }
