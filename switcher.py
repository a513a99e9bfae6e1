# switcher.py
"""
User-initiated mode switches.

Only one switch runs at a time (the busy flag). The displayed mode is never
updated from the switch response itself; a successful switch is followed by
one immediate poll and the page shows whatever the backend reports.
"""

from typing import Any
from urllib.parse import quote

from poller import ModePoller
from state import (
    ConfigTarget,
    SessionStore,
    SwitchConfirmed,
    SwitchFailed,
    SwitchFinished,
    SwitchStarted,
)
from transport import ApiTransport, TransportError

import logging
logger = logging.getLogger(__name__)


def switch_route(key: str) -> str:
    # The backend exposes the switch as a GET; kept for compatibility.
    return f"switch/{quote(key, safe='')}"


def _confirmation(payload: Any, target: ConfigTarget) -> str:
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return f"Switched to {target.name}"


class SwitchOrchestrator:
    def __init__(self, transport: ApiTransport, store: SessionStore, poller: ModePoller):
        self._transport = transport
        self._store = store
        self._poller = poller

    async def switch_to(self, target: ConfigTarget) -> bool:
        """
        Switch the daemon to target. Returns False if another switch is in
        flight or the backend rejected the request.
        """
        if self._store.state.busy:
            logger.info(f"Switch to {target.key} ignored, another switch is in flight")
            return False

        logger.info(f"Switching to {target.name} ({target.key})")
        self._store.dispatch(SwitchStarted(target))
        try:
            try:
                payload = await self._transport.call(switch_route(target.key))
            except TransportError as e:
                logger.warning(f"Error switching to {target.key}: {e}")
                self._store.dispatch(SwitchFailed(str(e)))
                return False

            self._store.dispatch(SwitchConfirmed(_confirmation(payload, target)))
            await self._poller.poll_once()
            return True
        finally:
            # no-op when SwitchFailed already released the lock
            self._store.dispatch(SwitchFinished())
