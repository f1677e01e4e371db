"""
Cancellable auto-capture countdown shared by the document scanner and the
selfie readiness check.
"""
import asyncio
import logging
from typing import Callable, Optional

from config import settings
from .models import CountdownStatus

logger = logging.getLogger(__name__)

IDLE = "idle"
COUNTING = "counting"
FIRED = "fired"


class CaptureCountdown:
    """
    idle -> counting(n) -> ... -> counting(1) -> fired

    update(True) while idle starts counting; update(False) while counting
    cancels straight back to idle. advance() is one countdown tick. With
    auto_tick the ticks are scheduled on the running asyncio loop, otherwise
    the caller drives advance() itself.

    Cancellation is synchronous: it bumps a generation counter and cancels the
    pending sleep, so a tick already waiting can never fire afterwards.
    """

    def __init__(
        self,
        on_fire: Callable[[], None],
        is_ready: Optional[Callable[[], bool]] = None,
        seconds: Optional[int] = None,
        tick_seconds: Optional[float] = None,
        revalidate_on_fire: Optional[bool] = None,
        auto_tick: bool = False,
    ):
        self.on_fire = on_fire
        self.is_ready = is_ready
        self.seconds = settings.COUNTDOWN_SECONDS if seconds is None else seconds
        self.tick_seconds = settings.COUNTDOWN_TICK_SECONDS if tick_seconds is None else tick_seconds
        self.revalidate_on_fire = (
            settings.REVALIDATE_ON_FIRE if revalidate_on_fire is None else revalidate_on_fire
        )
        self.auto_tick = auto_tick

        self.phase = IDLE
        self.remaining: Optional[int] = None
        self.cancellations = 0
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def status(self) -> CountdownStatus:
        return CountdownStatus(phase=self.phase, remaining=self.remaining)

    def update(self, ready: bool) -> None:
        """Feed the latest readiness value"""
        if self.phase == FIRED:
            return
        if ready and self.phase == IDLE:
            self._start()
        elif not ready and self.phase == COUNTING:
            self.cancel()

    def advance(self) -> None:
        """One countdown tick"""
        if self.phase != COUNTING:
            return

        final_tick = self.remaining == 1
        if self.is_ready is not None and (not final_tick or self.revalidate_on_fire):
            if not self.is_ready():
                self.cancel()
                return

        self.remaining -= 1
        if self.remaining <= 0:
            self._fire()
        else:
            logger.debug(f"Countdown at {self.remaining}")

    def cancel(self) -> None:
        if self.phase != COUNTING:
            return
        self.phase = IDLE
        self.remaining = None
        self.cancellations += 1
        self._stop_task()
        logger.info("Auto-capture countdown cancelled")

    def reset(self) -> None:
        """Back to idle from any phase (e.g. a retake)"""
        self._stop_task()
        self.phase = IDLE
        self.remaining = None

    def _start(self) -> None:
        self.phase = COUNTING
        self.remaining = self.seconds
        self._generation += 1
        logger.info(f"Auto-capture countdown started ({self.seconds}s)")

        if self.remaining <= 0:
            self._fire()
            return

        if self.auto_tick:
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._run(self._generation))

    def _fire(self) -> None:
        self.phase = FIRED
        self.remaining = 0
        # the ticking task finishes on its own after firing
        self._task = None
        logger.info("Auto-capture countdown fired")
        self.on_fire()

    def _stop_task(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            if generation != self._generation or self.phase != COUNTING:
                return
            self.advance()
            if self.phase != COUNTING:
                return
