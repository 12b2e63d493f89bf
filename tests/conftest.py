"""
Shared pytest fixtures for Dogma client tests.

Provides a scripted in-process Dogma server built on httpx.MockTransport and
clients wired to it, so tests exercise the real HTTP stack without sockets.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, List, Optional, Union

import httpx
import pytest
import pytest_asyncio

from dogma_client import DogmaClient, WatchConfig

Step = Union[
    httpx.Response,
    BaseException,
    Callable[[httpx.Request], Awaitable[httpx.Response]],
]


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def file_update(revision: int, path: str = "/a.json", content: Any = None) -> dict:
    """Body of a file watch response carrying a JSON entry."""
    return {
        "revision": revision,
        "entry": {
            "path": path,
            "type": "JSON",
            "content": {"a": "b"} if content is None else content,
            "revision": revision,
            "url": f"/api/v1/projects/foo/repos/bar/contents{path}",
        },
    }


class ScriptedDogmaServer:
    """In-process server answering requests from a script of steps.

    Each request consumes one step: a response is returned, an exception is
    raised as if by the network, and a coroutine function is awaited. Once the
    script is exhausted requests hang, like a long-poll with no change.
    """

    def __init__(self):
        self.steps: List[Step] = []
        self.requests: List[httpx.Request] = []
        self.hanging = asyncio.Event()
        self._release = asyncio.Event()

    def enqueue(self, *steps: Step) -> "ScriptedDogmaServer":
        self.steps.extend(steps)
        return self

    def release(self) -> None:
        self._release.set()

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.steps:
            self.hanging.set()
            await self._release.wait()
            return httpx.Response(304)

        step = self.steps.pop(0)
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, httpx.Response):
            return step
        return await step(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fast_watch_config() -> WatchConfig:
    """Watch settings with deterministic, near-zero backoff."""
    return WatchConfig(
        timeout=1.0,
        timeout_margin=1.0,
        backoff_initial_delay=0.001,
        backoff_multiplier=2.0,
        backoff_max_delay=0.008,
        jitter_rate=0.0,
    )


@pytest.fixture
def dogma_server() -> ScriptedDogmaServer:
    return ScriptedDogmaServer()


@pytest_asyncio.fixture
async def dogma_client(dogma_server, fast_watch_config):
    """Anonymous client talking to the scripted server."""
    client = DogmaClient(
        server_url="http://dogma.test",
        watch_config=fast_watch_config,
        transport=dogma_server.transport(),
    )
    try:
        yield client
    finally:
        dogma_server.release()
        await client.close()


@pytest_asyncio.fixture
async def authenticated_client(dogma_server, fast_watch_config):
    client = DogmaClient(
        server_url="http://dogma.test",
        token="secret-token",
        watch_config=fast_watch_config,
        transport=dogma_server.transport(),
    )
    try:
        yield client
    finally:
        dogma_server.release()
        await client.close()


@pytest.fixture
def make_json_response() -> Callable[[int, Any], httpx.Response]:
    return json_response


@pytest.fixture
def make_file_update() -> Callable[..., dict]:
    return file_update


def request_json(request: httpx.Request) -> Optional[Any]:
    if not request.content:
        return None
    return json.loads(request.content)


@pytest.fixture
def read_request_json() -> Callable[[httpx.Request], Optional[Any]]:
    return request_json
