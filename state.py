# state.py
"""
Session state for the mode switcher page.

The state is an immutable snapshot. Every change is an event fed through
reduce(), and the SessionStore swaps in the new snapshot and tells its
observers. The page renders only from the latest snapshot.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

import logging
logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Model
# -------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigTarget:
    key: str
    name: str

    @classmethod
    def from_json(cls, data: Any) -> "ConfigTarget":
        """
        Build a target from a {"key": ..., "name": ...} payload.
        Raises ValueError when the payload has no usable key.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        key = data.get("key")
        if not isinstance(key, str):
            raise ValueError("missing 'key'")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            name = key.title()
        return cls(key=key, name=name)


LOADING = ConfigTarget(key="", name="Loading...")
UNKNOWN = ConfigTarget(key="unknown", name="Unknown")


@dataclass(frozen=True)
class SessionState:
    # None until the registry load finished (successfully or not)
    registry: Optional[tuple[ConfigTarget, ...]] = None
    current: ConfigTarget = LOADING
    busy: bool = False
    status: str = ""
    switching: Optional[ConfigTarget] = None


# -------------------------------------------------------------------
# Events
# -------------------------------------------------------------------

@dataclass(frozen=True)
class RegistryLoaded:
    targets: tuple[ConfigTarget, ...]


@dataclass(frozen=True)
class RegistryFailed:
    error: str


@dataclass(frozen=True)
class ModePolled:
    mode: ConfigTarget


@dataclass(frozen=True)
class PollFailed:
    error: str


@dataclass(frozen=True)
class SwitchStarted:
    target: ConfigTarget


@dataclass(frozen=True)
class SwitchFailed:
    error: str


@dataclass(frozen=True)
class SwitchConfirmed:
    message: str


@dataclass(frozen=True)
class SwitchFinished:
    pass


def reduce(state: SessionState, event) -> SessionState:
    """
    Apply one event. Returns the same object when the event does not apply.
    """
    if isinstance(event, RegistryLoaded):
        return replace(state, registry=tuple(event.targets))

    if isinstance(event, RegistryFailed):
        return replace(state, registry=(), status=f"Error fetching config parts: {event.error}")

    if isinstance(event, ModePolled):
        return replace(state, current=event.mode)

    if isinstance(event, PollFailed):
        return replace(state, current=UNKNOWN, status=f"Error fetching mode: {event.error}")

    if isinstance(event, SwitchStarted):
        if state.busy:
            return state
        return replace(
            state,
            busy=True,
            switching=event.target,
            status=f"Switching to {event.target.name}...",
        )

    if isinstance(event, SwitchFailed):
        return replace(
            state,
            busy=False,
            switching=None,
            status=f"Error switching mode: {event.error}",
        )

    if isinstance(event, SwitchConfirmed):
        return replace(state, status=event.message)

    if isinstance(event, SwitchFinished):
        if not state.busy:
            return state
        return replace(state, busy=False, switching=None)

    raise TypeError(f"Unknown event: {event!r}")


# -------------------------------------------------------------------
# Store
# -------------------------------------------------------------------

class SessionStore:
    def __init__(self, state: SessionState | None = None):
        self._state = state or SessionState()
        self._closed = False
        self.observers: list[Callable[[SessionState], None]] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def dispatch(self, event) -> bool:
        """
        Reduce an event into the current snapshot.
        Returns True if the snapshot changed.
        """
        if self._closed:
            logger.debug(f"Store closed, dropping {type(event).__name__}")
            return False
        new_state = reduce(self._state, event)
        if new_state is self._state:
            return False
        self._state = new_state
        self.notify(new_state)
        return True

    def add_observer(self, observer: Callable[[SessionState], None]):
        self.observers.append(observer)

    def remove_observer(self, observer: Callable[[SessionState], None]):
        if observer in self.observers:
            self.observers.remove(observer)

    def notify(self, new_state: SessionState):
        for observer in list(self.observers):
            observer(new_state)

    def close(self):
        self._closed = True
        self.observers.clear()


# -------------------------------------------------------------------
# View projection
# -------------------------------------------------------------------

REGISTRY_LOADING = "loading"
REGISTRY_EMPTY = "empty"
REGISTRY_READY = "ready"


@dataclass(frozen=True)
class ButtonState:
    target: ConfigTarget
    active: bool
    disabled: bool
    label: str


def registry_status(state: SessionState) -> str:
    if state.registry is None:
        return REGISTRY_LOADING
    if not state.registry:
        return REGISTRY_EMPTY
    return REGISTRY_READY


def button_states(state: SessionState) -> list[ButtonState]:
    buttons = []
    for target in state.registry or ():
        switching = (
            state.busy
            and state.switching is not None
            and state.switching.key == target.key
        )
        buttons.append(ButtonState(
            target=target,
            active=target.key == state.current.key,
            disabled=state.busy,
            label="Switching..." if switching else f"Switch to {target.name}",
        ))
    return buttons


def current_mode_label(state: SessionState) -> str:
    return state.current.name or "[Unknown]"
