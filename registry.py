# registry.py
"""
Loads the switchable configuration targets once per session.
"""

from state import ConfigTarget, RegistryFailed, RegistryLoaded, SessionStore
from transport import ApiTransport, TransportError

import logging
logger = logging.getLogger(__name__)

REGISTRY_ROUTE = "configparts"


async def fetch_registry(transport: ApiTransport) -> tuple[ConfigTarget, ...]:
    """
    Fetch and validate the registry. Duplicate keys keep their first entry.
    Raises TransportError.
    """
    payload = await transport.call(REGISTRY_ROUTE)

    # the backend encodes "no parts" as null
    if payload is None:
        return ()
    if not isinstance(payload, list):
        raise TransportError(TransportError.DECODE, "Config parts response is not a list")

    targets: list[ConfigTarget] = []
    seen: set[str] = set()
    for item in payload:
        try:
            target = ConfigTarget.from_json(item)
        except ValueError as e:
            raise TransportError(TransportError.DECODE, f"Malformed config part: {e}") from e
        if target.key in seen:
            logger.warning(f"Duplicate config part key '{target.key}' ignored")
            continue
        seen.add(target.key)
        targets.append(target)
    return tuple(targets)


class RegistryLoader:
    def __init__(self, transport: ApiTransport, store: SessionStore):
        self._transport = transport
        self._store = store
        self._started = False

    async def load(self) -> bool:
        if self._started:
            logger.warning("Registry already loaded for this session, ignoring reload")
            return False
        self._started = True

        try:
            targets = await fetch_registry(self._transport)
        except TransportError as e:
            logger.warning(f"Error fetching config parts: {e}")
            self._store.dispatch(RegistryFailed(str(e)))
            return False

        logger.info(f"Loaded {len(targets)} config part(s)")
        self._store.dispatch(RegistryLoaded(targets))
        return True
