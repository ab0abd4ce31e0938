import abc
import logging

from llmcli.context import AppContext
from llmcli.models import AdapterResult, InvocationRequest
from llmcli.utils.cli import FRAMING, OutputSink


class BaseEngine(abc.ABC):
    """Base class for all backend engines.

    To add support for a new backend, make a subclass of this, implement :meth:`complete`, and add it to the router.
    """

    name: str
    """A short human-readable name for the backend, used in logs and error messages."""

    logger: logging.Logger

    def __init__(self, ctx: AppContext):
        """
        :param ctx: The run's context, which owns credentials and shared clients.
        """
        self.ctx = ctx

    def __init_subclass__(cls, **kwargs):
        # so that each engine logs under its own module name
        super().__init_subclass__(**kwargs)
        cls.logger = logging.getLogger(cls.__module__)

    # ==== required interface ====
    @abc.abstractmethod
    async def complete(self, request: InvocationRequest, sink: OutputSink) -> AdapterResult:
        """
        Get a completion for ``request.prompt``, writing output to *sink* as it becomes available.

        Parameters the backend does not support (e.g. a system prompt for a completion model) are ignored.

        :raises ConfigurationError: A required credential is missing. Raised before any network activity.
        :raises UpstreamError: The backend failed to produce a completion.
        """
        raise NotImplementedError

    # ==== public interface ====
    async def invoke(self, request: InvocationRequest, sink: OutputSink) -> str:
        """Like :meth:`complete`, but only returns the completion text."""
        result = await self.complete(request, sink)
        return result.text

    # ==== helpers ====
    @staticmethod
    def write_framing(request: InvocationRequest, sink: OutputSink, text: str):
        """Write *text* to the sink as framing, unless the request is quiet."""
        if not request.quiet:
            sink.write(text, style=FRAMING)

    @staticmethod
    def write_completion(sink: OutputSink, completion: str):
        """Write the completion to the sink, followed by a newline if it doesn't already end with one."""
        sink.write(completion)
        if completion and not completion.endswith("\n"):
            sink.write("\n")

    def __repr__(self):
        return f"{type(self).__name__}()"
