# poller.py
"""
Background refresh of the daemon's active mode.

Responsibilities:
- Poll /currentmode immediately and then on a fixed interval
- Keep polling through failures
- Stop for good when cancelled, discarding any in-flight result
"""

import asyncio
import math

from state import ConfigTarget, ModePolled, PollFailed, SessionStore
from transport import ApiTransport, TransportError

import logging
logger = logging.getLogger(__name__)

CURRENT_MODE_ROUTE = "currentmode"
DEFAULT_POLL_INTERVAL = 5.0


async def fetch_current_mode(transport: ApiTransport) -> ConfigTarget:
    payload = await transport.call(CURRENT_MODE_ROUTE)
    try:
        return ConfigTarget.from_json(payload)
    except ValueError as e:
        raise TransportError(TransportError.DECODE, f"Malformed current mode: {e}") from e


def next_deadline(deadline: float, now: float, interval: float) -> float:
    """
    Deadline of the next poll on a fixed cadence. Ticks missed while a slow
    request was in flight are skipped rather than fired back to back.
    """
    deadline += interval
    if deadline < now:
        missed = math.ceil((now - deadline) / interval)
        deadline += missed * interval
    return deadline


class ModePoller:
    def __init__(
        self,
        transport: ApiTransport,
        store: SessionStore,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._transport = transport
        self._store = store
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def poll_once(self) -> ConfigTarget | None:
        """
        One poll cycle. Returns the observed mode, or None on failure or
        when the poller was cancelled while the call was in flight.
        """
        try:
            mode = await fetch_current_mode(self._transport)
        except TransportError as e:
            if self._cancelled:
                return None
            logger.warning(f"Error fetching current mode: {e}")
            self._store.dispatch(PollFailed(str(e)))
            return None

        if self._cancelled:
            logger.debug("Poll result arrived after cancellation, discarded")
            return None
        logger.debug(f"Current mode: {mode.key}")
        self._store.dispatch(ModePolled(mode))
        return mode

    async def _run(self) -> None:
        logger.info(f"Mode poller started ({self.interval}s interval)")
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while not self._cancelled:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Unexpected error in mode poll, continuing")
            deadline = next_deadline(deadline, loop.time(), self.interval)
            await asyncio.sleep(max(0.0, deadline - loop.time()))

    def start(self) -> asyncio.Task:
        if self._cancelled:
            raise RuntimeError("Poller was cancelled and cannot be restarted")
        if self._task is not None:
            raise RuntimeError("Poller already started")
        self._task = asyncio.get_running_loop().create_task(self._run(), name="mode-poller")
        return self._task

    def cancel(self) -> bool:
        """
        Stop the schedule. Only the first call has an effect.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
        logger.info("Mode poller cancelled")
        return True
