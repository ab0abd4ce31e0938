import asyncio
import json
import logging
import urllib.parse
import uuid

from llmcli.exceptions import MissingModelDependencies, UpstreamError
from llmcli.models import BingVariant

try:
    import aiohttp
except ImportError:
    raise MissingModelDependencies(
        'The BingEngine requires extra dependencies. Please install llmcli with "pip install aiohttp".'
    ) from None

log = logging.getLogger(__name__)

# SignalR JSON protocol: each record is a JSON object terminated by this character
RECORD_DELIMITER = "\x1e"
HANDSHAKE = {"protocol": "json", "version": 1}
PING = {"type": 6}

BASE_OPTION_SETS = [
    "nlu_direct_response_filter",
    "deepleo",
    "disable_emoji_spoken_text",
    "responsible_ai_policy_235",
    "enablemm",
    "dv3sugg",
]
VARIANT_OPTION_SETS = {
    BingVariant.CREATIVE: ["h3imaginative", "clgalileo", "gencontentv3"],
    BingVariant.BALANCED: ["galileo"],
    BingVariant.PRECISE: ["h3precise", "clgalileo"],
}
ALLOWED_MESSAGE_TYPES = ["Chat", "InternalSearchQuery", "InternalSearchResult", "Disengaged", "InternalLoaderMessage"]

DEFAULT_HEADERS = {
    "accept": "application/json",
    "accept-language": "en-US,en;q=0.9",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/113.0.0.0"
        " Safari/537.36 Edg/113.0.1774.50"
    ),
    "x-ms-useragent": "azsdk-js-api-client-factory/1.0.0-beta.1 core-rest-pipeline/1.10.0 OS/Win32",
}


# ==== protocol helpers ====
def encode_record(obj: dict) -> str:
    return json.dumps(obj) + RECORD_DELIMITER


def decode_records(data: str) -> list[dict]:
    """Split a websocket text message into its SignalR records."""
    return [json.loads(part) for part in data.split(RECORD_DELIMITER) if part]


def cookie_header(cookie: str) -> str:
    """Accept either the bare ``_U`` value or a full ``Cookie`` header copied from the browser."""
    if ";" in cookie or cookie.startswith("_U="):
        return cookie
    return f"_U={cookie}"


def build_chat_invocation(prompt: str, conversation: dict, variant: BingVariant, invocation_id: int = 0) -> dict:
    """Build the ``chat`` invocation record that starts a new single-turn conversation."""
    arguments = {
        "source": "cib",
        "optionsSets": BASE_OPTION_SETS + VARIANT_OPTION_SETS[variant],
        "allowedMessageTypes": ALLOWED_MESSAGE_TYPES,
        "isStartOfSession": True,
        "tone": variant.value,
        "message": {"author": "user", "inputMethod": "Keyboard", "text": prompt, "messageType": "Chat"},
        "participant": {"id": conversation["clientId"]},
        "conversationId": conversation["conversationId"],
    }
    # newer conversations only carry an encrypted signature, which goes in the websocket URL instead
    if conversation.get("conversationSignature"):
        arguments["conversationSignature"] = conversation["conversationSignature"]
    return {"arguments": [arguments], "invocationId": str(invocation_id), "target": "chat", "type": 4}


def parse_final_frame(frame: dict) -> str:
    """
    Get the bot's reply from a ``type: 2`` (completion) record.

    :raises UpstreamError: Bing reported an error, or the record has no reply in it.
    """
    item = frame.get("item") or {}
    result = item.get("result") or {}
    if result.get("value", "Success") != "Success":
        raise UpstreamError(f"Bing returned an error: {result.get('value')}: {result.get('message')}", backend="bing")
    # internal messages (search queries, loaders) have a messageType; the reply does not
    for message in reversed(item.get("messages") or []):
        if message.get("author") == "bot" and "messageType" not in message:
            return message.get("text") or ""
    raise UpstreamError(f"Bing's response did not contain a reply: {frame}", backend="bing")


class BingChatSession:
    """aiohttp-based client for Bing Chat, authenticated with a browser cookie instead of an API key.

    One instance holds one :class:`aiohttp.ClientSession` and can send any number of single-turn messages.
    """

    CREATE_URL = "https://www.bing.com/turing/conversation/create"
    CHATHUB_URL = "wss://sydney.bing.com/sydney/ChatHub"

    def __init__(self, cookie: str, http: aiohttp.ClientSession = None, timeout: float = 60 * 60):
        """
        :param cookie: The ``_U`` cookie value (or a full cookie header) from a logged-in browser session.
        :param http: The :class:`aiohttp.ClientSession` to use; if not provided, creates a new session on first use.
        :param timeout: The total timeout of a single message, in seconds.
        """
        self.cookie = cookie
        self.http = http
        self.timeout = timeout

    def _get_http(self) -> aiohttp.ClientSession:
        if self.http is None:
            self.http = aiohttp.ClientSession(
                headers={**DEFAULT_HEADERS, "cookie": cookie_header(self.cookie)},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.http

    async def create_conversation(self) -> dict:
        """
        Ask Bing for a new conversation.

        :returns: A dict with ``conversationId``, ``clientId``, and either ``conversationSignature`` or
            ``encryptedSignature``.
        """
        http = self._get_http()
        headers = {"x-ms-client-request-id": str(uuid.uuid4())}
        async with http.get(self.CREATE_URL, headers=headers) as resp:
            log.debug(f"GET {self.CREATE_URL} returned {resp.status}")
            if not 199 < resp.status < 300:
                data = await resp.text()
                log.warning(f"GET {self.CREATE_URL} returned {resp.status} {resp.reason}\n{data}")
                raise UpstreamError(f"Could not create a Bing conversation: {resp.status}: {resp.reason}", "bing")
            try:
                data = await resp.json(content_type=None)
            except (json.JSONDecodeError, ValueError) as e:
                raise UpstreamError(f"Could not deserialize Bing response: {await resp.text()}", "bing") from e
            encrypted = resp.headers.get("x-sydney-encryptedconversationsignature")

        result = data.get("result") or {}
        if result.get("value", "Success") != "Success":
            raise UpstreamError(
                f"Bing refused the conversation: {result.get('value')}: {result.get('message')}", backend="bing"
            )
        if encrypted:
            data["encryptedSignature"] = encrypted
        return data

    async def send_message(self, prompt: str, variant: BingVariant = BingVariant.BALANCED) -> tuple[str, dict]:
        """
        Send *prompt* as the first and only message of a new conversation.

        :returns: A tuple of (the reply text, the raw final record).
        :raises UpstreamError: The request failed, timed out, or the response could not be understood.
        """
        try:
            conversation = await self.create_conversation()
            return await self._chat(prompt, conversation, variant)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.warning(f"Bing request failed: {e!r}")
            raise UpstreamError(f"Could not reach Bing: {e!r}", backend="bing") from e

    async def _chat(self, prompt: str, conversation: dict, variant: BingVariant) -> tuple[str, dict]:
        http = self._get_http()
        url = self.CHATHUB_URL
        if conversation.get("encryptedSignature"):
            url += "?sec_access_token=" + urllib.parse.quote(conversation["encryptedSignature"], safe="")

        final = None
        async with http.ws_connect(url) as ws:
            await ws.send_str(encode_record(HANDSHAKE))
            await ws.receive()  # handshake ack: {}
            await ws.send_str(encode_record(PING))
            await ws.send_str(encode_record(build_chat_invocation(prompt, conversation, variant)))

            done = False
            async for msg in ws:
                if msg.type != aiohttp.WSMsgType.TEXT:
                    if msg.type == aiohttp.WSMsgType.ERROR:
                        raise UpstreamError(f"Bing websocket error: {ws.exception()!r}", backend="bing")
                    break
                try:
                    records = decode_records(msg.data)
                except ValueError as e:
                    log.warning(f"Could not deserialize Bing message: {msg.data!r}")
                    raise UpstreamError(f"Could not deserialize Bing message: {msg.data!r}", backend="bing") from e
                for record in records:
                    if not isinstance(record, dict):
                        raise UpstreamError(f"Unexpected record from Bing: {record!r}", backend="bing")
                    rtype = record.get("type")
                    if rtype == 6:
                        await ws.send_str(encode_record(PING))
                    elif rtype == 2:
                        final = record
                    elif rtype == 3:
                        done = True
                    elif rtype == 7:
                        raise UpstreamError(f"Bing closed the connection: {record.get('error')}", backend="bing")
                if done:
                    break

        if final is None:
            raise UpstreamError("Bing closed the connection without replying", backend="bing")
        return parse_final_frame(final), final

    async def close(self):
        """Close the underlying aiohttp session."""
        if self.http is None:
            return
        await self.http.close()
        self.http = None  # this allows us to reuse the client after it has been closed
