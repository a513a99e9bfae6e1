# ui/switcher_page.py
"""
The mode switcher page.

Responsibilities:
- Start one SwitcherSession per browser tab and close it with the tab
- Render the latest SessionState snapshot
- Forward button clicks to the session
"""

from functools import partial

from nicegui import ui

from session import SwitcherSession
from settings import Settings
from state import (
    REGISTRY_EMPTY,
    REGISTRY_LOADING,
    SessionState,
    button_states,
    current_mode_label,
    registry_status,
)
from transport import ApiTransport

import logging
logger = logging.getLogger(__name__)

NO_TARGETS_TEXT = 'You have no mpd configurations to switch/activate.'


# -------------------
# Rendering
# -------------------

def build_header():
    dark = ui.dark_mode()
    dark.enable()
    with ui.header().classes('items-center'):
        ui.colors(brand='#7e57c2')
        ui.label('MPD Mode Switcher').classes('text-lg font-bold')


def render_mode_buttons(session: SwitcherSession, state: SessionState):
    status = registry_status(state)
    if status == REGISTRY_LOADING:
        with ui.row().classes('w-full justify-center items-center gap-2'):
            ui.spinner(size='lg')
            ui.label('Loading configurations...').classes('text-gray-300')
        return
    if status == REGISTRY_EMPTY:
        ui.label(NO_TARGETS_TEXT).classes('text-lg text-gray-300 text-center w-full')
        return

    for button_state in button_states(state):
        button = ui.button(
            button_state.label,
            on_click=partial(session.switch_to, button_state.target),
        ).classes('w-full')
        if button_state.active:
            button.props('color=positive icon=check')
        else:
            button.props('color=brand')
        if button_state.disabled:
            button.disable()


def render_state(session: SwitcherSession, state: SessionState):
    with ui.column().classes('w-full items-center mb-4'):
        ui.label('Current MPD Output Mode:').classes('text-lg text-gray-300')
        ui.label(current_mode_label(state)).classes('text-2xl font-bold text-green-400')

    with ui.column().classes('w-full gap-4'):
        render_mode_buttons(session, state)

    if state.status:
        ui.label(state.status).classes('w-full mt-4 p-4 bg-gray-700 rounded text-sm text-center')


# -------------------
# Page
# -------------------

def register_pages(transport: ApiTransport, settings: Settings):

    @ui.page('/')
    async def switcher_page():
        build_header()
        session = SwitcherSession(transport, poll_interval=settings.poll_interval)

        @ui.refreshable
        def state_ui():
            render_state(session, session.state)

        with ui.card().classes('w-full max-w-md mx-auto p-8'):
            state_ui()

        session.store.add_observer(lambda _state: state_ui.refresh())

        client = ui.context.client

        @client.on_delete
        def close_session():
            session.close()

        try:
            await client.connected()
        except TimeoutError:
            logger.warning("switcher page never connected, session not started")
            session.close()
            return
        logger.info("switcher page connected, starting session")
        session.start()
