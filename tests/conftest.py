"""
Pytest configuration for the AI responder tests.

Discord objects are faked with SimpleNamespace; OpenRouter is replaced by a
local aiohttp test server so the real client code path is exercised.

Usage:
    pytest tests/ -v
"""

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from cogs.respond.core import RespondSettings

COMPLETIONS_PATH = "/api/v1/chat/completions"


def make_message(channel_id: int, content: str, author: str = "alice", bot: bool = False):
    """Fake discord.Message with the attributes the collector reads."""
    return SimpleNamespace(
        channel=SimpleNamespace(id=channel_id),
        content=content,
        author=SimpleNamespace(display_name=author, bot=bot),
    )


def completion_body(
    text: str = "Sounds good, see you there!",
    model: str = "google/gemini-flash-1.5-8b-exp",
    usage: Optional[Dict[str, int]] = None,
    choices: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """JSON body shaped like an OpenRouter chat completion."""
    if choices is None:
        choices = [{
            "message": {"role": "assistant", "content": text},
            "finish_reason": "stop",
            "index": 0,
        }]
    return {
        "id": "gen-123",
        "model": model,
        "choices": choices,
        "usage": usage if usage is not None else {
            "prompt_tokens": 100,
            "completion_tokens": 50,
            "total_tokens": 150,
        },
    }


class Upstream:
    """Scripted completions endpoint that records every request."""

    def __init__(self):
        self.status = 200
        self.body = json.dumps(completion_body())
        self.requests: List[Dict[str, Any]] = []
        self.url = ""

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append({
            "headers": request.headers.copy(),
            "json": await request.json(),
        })
        return web.Response(status=self.status, text=self.body, content_type="application/json")


@pytest.fixture
async def upstream():
    state = Upstream()
    app = web.Application()
    app.router.add_post(COMPLETIONS_PATH, state.handle)

    server = TestServer(app)
    await server.start_server()
    state.url = str(server.make_url(COMPLETIONS_PATH))
    yield state
    await server.close()


@pytest.fixture
def settings() -> RespondSettings:
    return RespondSettings(api_key="sk-or-test-key")
