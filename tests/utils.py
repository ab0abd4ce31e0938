"""Helpers for mocking the backends in tests."""

import json
from typing import NamedTuple

import aiohttp
import httpx
from openai import AsyncOpenAI

from llmcli.models import BingVariant


class MockOpenAIHandler:
    """
    An httpx handler that answers OpenAI API routes with canned JSON and records every request it receives.

    Routes are matched on the end of the URL path (e.g. ``"/chat/completions"``).
    """

    def __init__(self, routes: dict[str, tuple[int, dict]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, (status, body) in self.routes.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(status, json=body)
        raise ValueError(f"route is not mocked in tests: {request.url.path}")

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


def mock_openai_client(handler) -> AsyncOpenAI:
    """An AsyncOpenAI client whose HTTP requests are answered by *handler* instead of the network."""
    return AsyncOpenAI(
        api_key="sk-fake-api-key",
        base_url="https://api.openai.com/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def chat_completion(content: str | None, model: str = "gpt-3.5-turbo") -> dict:
    return dict(
        id="chatcmpl-some-id",
        object="chat.completion",
        created=1700000000,
        model=model,
        usage=dict(prompt_tokens=1, completion_tokens=1, total_tokens=2),
        choices=[dict(index=0, message=dict(role="assistant", content=content), finish_reason="stop")],
    )


def text_completion(text: str, model: str = "text-davinci-003") -> dict:
    return dict(
        id="cmpl-some-id",
        object="text_completion",
        created=1700000000,
        model=model,
        usage=dict(prompt_tokens=1, completion_tokens=1, total_tokens=2),
        choices=[dict(index=0, text=text, logprobs=None, finish_reason="stop")],
    )


def api_error(message: str) -> dict:
    return {"error": {"message": message, "type": "invalid_request_error", "param": None, "code": None}}


class FakeBingSession:
    """Stands in for a BingChatSession: replies with a fixed text and records what it was sent."""

    def __init__(self, reply: str = "Hello from Bing"):
        self.reply = reply
        self.sent: list[tuple[str, BingVariant]] = []
        self.closed = False

    async def send_message(self, prompt: str, variant: BingVariant = BingVariant.BALANCED):
        self.sent.append((prompt, variant))
        return self.reply, {"type": 2, "item": {"messages": [{"author": "bot", "text": self.reply}]}}

    async def close(self):
        self.closed = True


# ==== bing transport ====
class FakeWSMessage(NamedTuple):
    type: aiohttp.WSMsgType
    data: str = ""


class FakeWebSocket:
    """Stands in for an aiohttp websocket: yields canned text frames, then closes, and records what was sent."""

    def __init__(self, frames: list):
        self.frames = frames
        self.sent: list[str] = []

    async def send_str(self, data: str):
        self.sent.append(data)

    async def receive(self):
        return FakeWSMessage(aiohttp.WSMsgType.TEXT, "{}\x1e")

    def exception(self):
        return ConnectionResetError("connection reset by peer")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def __aiter__(self):
        for frame in self.frames:
            if isinstance(frame, str):
                yield FakeWSMessage(aiohttp.WSMsgType.TEXT, frame)
            else:
                yield FakeWSMessage(frame)


class FakeResponse:
    def __init__(self, status: int, body, headers: dict = None):
        self.status = status
        self.reason = "OK" if status < 300 else "Unauthorized"
        self.body = body
        self.headers = headers or {}

    async def text(self):
        return self.body if isinstance(self.body, str) else json.dumps(self.body)

    async def json(self, content_type="application/json"):
        return json.loads(await self.text())

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeHTTP:
    """
    Stands in for the aiohttp.ClientSession of a BingChatSession.

    ``GET`` answers conversation/create with *create*; ``ws_connect`` opens a :class:`FakeWebSocket` that yields
    *frames* (text frames as str, other message types as a :class:`aiohttp.WSMsgType`).
    """

    def __init__(self, frames: list = (), create: FakeResponse = None, get_error: Exception = None):
        self.create = create or FakeResponse(200, conversation_created())
        self.get_error = get_error
        self.ws = FakeWebSocket(list(frames))
        self.requested: list[str] = []
        self.ws_urls: list[str] = []
        self.closed = False

    def get(self, url, headers=None):
        self.requested.append(url)
        if self.get_error is not None:
            raise self.get_error
        return self.create

    def ws_connect(self, url):
        self.ws_urls.append(url)
        return self.ws

    async def close(self):
        self.closed = True


def conversation_created(signature: str | None = "sig-1", value: str = "Success") -> dict:
    data = {"conversationId": "conv-1", "clientId": "client-1", "result": {"value": value, "message": None}}
    if signature is not None:
        data["conversationSignature"] = signature
    return data


def bing_final(text: str) -> dict:
    return {
        "type": 2,
        "invocationId": "0",
        "item": {
            "messages": [
                {"author": "user", "text": "Hello"},
                {"author": "bot", "text": f"Searching for: {text}", "messageType": "InternalSearchQuery"},
                {"author": "bot", "text": text},
            ],
            "result": {"value": "Success", "message": None},
        },
    }


# prints its arguments as JSON, like a model that completes with a description of its input
ECHO_SCRIPT = """\
import argparse
import json

parser = argparse.ArgumentParser()
parser.add_argument("--model")
parser.add_argument("--prompt")
args = parser.parse_args()
print(json.dumps({"model": args.model, "prompt": args.prompt}))
"""

FAILING_SCRIPT = """\
import sys

print("model not found")
sys.exit(3)
"""
