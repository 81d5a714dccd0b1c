"""Shared test fixtures.

The network is replaced by ``httpx.MockTransport`` driven by a
:class:`ScriptedService` that replays canned responses in order and
records every request it receives.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterator, List, Union

import httpx
import pytest

from lbg import LbgClient, Settings

Reply = Union[httpx.Response, Exception]


def reply(status: int = 200, body: Any = None, *, raw: bytes | None = None) -> httpx.Response:
    """Build a canned response from a JSON-serialisable body or raw bytes."""
    content = raw if raw is not None else json.dumps(body).encode("utf-8")
    return httpx.Response(status, content=content, headers={"Content-Type": "application/json"})


class ScriptedService:
    """Replay replies in order; the last one repeats once the script runs out."""

    def __init__(self, *replies: Reply) -> None:
        self.replies: List[Reply] = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        item = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(item, Exception):
            raise item
        # fresh response per request so the body stream is never shared
        return httpx.Response(item.status_code, content=item.content, headers=item.headers)


@pytest.fixture
def make_client() -> Iterator[Callable[..., tuple[LbgClient, ScriptedService]]]:
    """Build an ``LbgClient`` wired to a scripted service."""
    clients: List[LbgClient] = []

    def factory(*replies: Reply, sleep: Callable[[float], None] | None = None,
                **settings: Any) -> tuple[LbgClient, ScriptedService]:
        service = ScriptedService(*replies)
        transport = httpx.Client(transport=httpx.MockTransport(service))
        kwargs: dict[str, Any] = {"transport": transport}
        if sleep is not None:
            kwargs["sleep"] = sleep
        client = LbgClient(Settings(**settings), **kwargs)
        clients.append(client)
        return client, service

    yield factory

    for client in clients:
        client._transport.close()
