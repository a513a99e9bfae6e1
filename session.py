# session.py
"""
One switcher session per mounted page (browser tab).
"""

import asyncio

from poller import DEFAULT_POLL_INTERVAL, ModePoller
from registry import RegistryLoader
from state import ConfigTarget, SessionState, SessionStore
from switcher import SwitchOrchestrator
from transport import ApiTransport

import logging
logger = logging.getLogger(__name__)


class SwitcherSession:
    def __init__(self, transport: ApiTransport, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.store = SessionStore()
        self.registry = RegistryLoader(transport, self.store)
        self.poller = ModePoller(transport, self.store, interval=poll_interval)
        self.switcher = SwitchOrchestrator(transport, self.store, self.poller)
        self._registry_task: asyncio.Task | None = None
        self._started = False

    @property
    def state(self) -> SessionState:
        return self.store.state

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.info("Switcher session started")
        loop = asyncio.get_running_loop()
        self._registry_task = loop.create_task(self.registry.load(), name="registry-load")
        self.poller.start()

    async def switch_to(self, target: ConfigTarget) -> bool:
        return await self.switcher.switch_to(target)

    def close(self) -> None:
        """
        Tear down: stop polling and freeze the state. In-flight calls finish
        on their own but can no longer change anything.
        """
        if self.store.closed:
            return
        self.poller.cancel()
        self.store.close()
        logger.info("Switcher session closed")
