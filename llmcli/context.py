"""The per-process state shared by engines: credentials, the OpenAI client, and the Bing session."""

import logging
import os
from pathlib import Path
from typing import Mapping, TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from .engines.bing.client import BingChatSession

log = logging.getLogger(__name__)

DEFAULT_LOCAL_SCRIPT = str(Path(__file__).parent / "engines" / "huggingface" / "use.py")

OPENAI_KEY_MISSING = (
    "OpenAI API key not found. Please set the OPENAI_API_KEY environment variable.\n\n"
    "You can create an API key at https://platform.openai.com/account/api-keys"
)
BING_COOKIE_MISSING = (
    "Bing cookie not found. Please set the BING_COOKIE environment variable.\n\n"
    "Use Microsoft Edge, navigate to Bing Chat, look at the sent cookies in the developer tools (Console/Network) and"
    " copy the value. Only the _U cookie is required for authentication."
)


class AppContext:
    """
    Everything an engine needs from the outside world, created once per run by the CLI.

    The OpenAI client and the Bing session are created lazily on first use and reused for the rest of the process.
    Credentials are read from *env* at that moment, so a missing credential only matters to the engine that needs it.
    """

    def __init__(
        self,
        env: Mapping[str, str] = None,
        *,
        openai_client: "AsyncOpenAI" = None,
        bing_session: "BingChatSession" = None,
        local_script: str = None,
        stdout=None,
    ):
        """
        :param env: The environment to read credentials from (default ``os.environ``).
        :param openai_client: An existing client to use instead of creating one from ``OPENAI_API_KEY``.
        :param bing_session: An existing Bing session to use instead of creating one from ``BING_COOKIE``.
        :param local_script: The script run by the HuggingFace engine (default ``LLM_LOCAL_SCRIPT`` or the bundled
            ``use.py``).
        :param stdout: Where the HuggingFace engine copies its subprocess output (default ``sys.stdout`` at the time
            of writing).
        """
        self.env = os.environ if env is None else env
        # the script runs with its own directory as the working directory, so relative paths are resolved here
        self.local_script = os.path.abspath(local_script or self.env.get("LLM_LOCAL_SCRIPT") or DEFAULT_LOCAL_SCRIPT)
        self.stdout = stdout
        self._openai_client = openai_client
        self._bing_session = bing_session

    def require(self, name: str, msg: str) -> str:
        """Return the env value *name*, or raise a :class:`.ConfigurationError` with *msg* if it is unset or empty."""
        value = self.env.get(name)
        if not value:
            raise ConfigurationError(msg, variable=name)
        return value

    # ==== lazy handles ====
    def openai_client(self) -> "AsyncOpenAI":
        """The shared OpenAI client. Requires ``OPENAI_API_KEY``; ``OPENAI_ORGANIZATION_ID`` is optional."""
        if self._openai_client is None:
            from openai import AsyncOpenAI

            api_key = self.require("OPENAI_API_KEY", OPENAI_KEY_MISSING)
            organization = self.env.get("OPENAI_ORGANIZATION_ID") or None
            log.debug("Creating OpenAI client (organization=%s)", organization)
            self._openai_client = AsyncOpenAI(api_key=api_key, organization=organization)
        return self._openai_client

    def bing_session(self) -> "BingChatSession":
        """The shared Bing Chat session. Requires ``BING_COOKIE``."""
        if self._bing_session is None:
            from .engines.bing.client import BingChatSession

            cookie = self.require("BING_COOKIE", BING_COOKIE_MISSING)
            log.debug("Creating Bing Chat session")
            self._bing_session = BingChatSession(cookie=cookie)
        return self._bing_session

    async def close(self):
        """Close any handles that were opened during the run."""
        if self._openai_client is not None:
            await self._openai_client.close()
            self._openai_client = None
        if self._bing_session is not None:
            await self._bing_session.close()
            self._bing_session = None
