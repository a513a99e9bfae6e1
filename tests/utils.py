from __future__ import annotations

import asyncio
import json

import httpx

BASE_URL = "http://daemon.test/api"

EXCLUSIVE = {"key": "exclusive", "name": "Exclusive (DSD)"}
PIPEWIRE = {"key": "pipewire", "name": "PipeWire"}


class FakeBackend:
    """Scriptable stand-in for the switcher backend.

    Each route answers from a queue of responses; the last one repeats.
    A response is an httpx.Response, an exception to raise, or a JSON value
    returned with status 200. A route can be gated on an asyncio.Event to
    hold a call in flight.
    """

    def __init__(self):
        self.routes: dict[str, list] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.arrived: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    def set(self, path: str, *responses):
        self.routes[path] = list(responses)

    def gate(self, path: str) -> asyncio.Event:
        self.gates[path] = asyncio.Event()
        self.arrived[path] = asyncio.Event()
        return self.gates[path]

    def count(self, path: str) -> int:
        return self.calls.count(path)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/")
        self.calls.append(path)
        if path in self.gates:
            self.arrived[path].set()
            await self.gates[path].wait()

        queue = self.routes.get(path)
        if not queue:
            return httpx.Response(404, json={"error": f"no route {path}"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(
            200, content=json.dumps(response), headers={"content-type": "application/json"}
        )


async def wait_for(predicate, timeout: float = 2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)
