from llmcli.exceptions import MissingModelDependencies, UpstreamError
from llmcli.models import AdapterResult, InvocationRequest
from llmcli.utils.cli import OutputSink
from .model_constants import REQUEST_TIMEOUT
from ..base import BaseEngine

try:
    import openai
except ImportError:
    raise MissingModelDependencies(
        'The OpenAI engines require extra dependencies. Please install llmcli with "pip install openai".'
    ) from None


class _OpenAIBase(BaseEngine):
    name = "openai"

    @staticmethod
    def hyperparams(request: InvocationRequest) -> dict:
        """The sampling params to send with the request. ``max_tokens`` is left to the API default if None."""
        params = {"temperature": request.temperature}
        if request.max_tokens is not None:
            params["max_tokens"] = request.max_tokens
        return params

    def upstream_error(self, e: Exception) -> UpstreamError:
        self.logger.warning(f"OpenAI request failed: {e}")
        return UpstreamError(f"OpenAI returned an error: {e}", backend=self.name)


class OpenAICompletionEngine(_OpenAIBase):
    """Engine for single-turn text completion models (``/completions``).

    The system prompt is not supported and is ignored.
    """

    async def complete(self, request: InvocationRequest, sink: OutputSink) -> AdapterResult:
        client = self.ctx.openai_client()

        self.write_framing(request, sink, request.prompt)
        self.write_framing(request, sink, " ")

        self.logger.debug(f"POST /completions model={request.model}")
        try:
            response = await client.completions.create(
                model=request.model, prompt=request.prompt, timeout=REQUEST_TIMEOUT, **self.hyperparams(request)
            )
        except openai.OpenAIError as e:
            raise self.upstream_error(e) from e

        try:
            completion = response.choices[0].text
        except (IndexError, AttributeError, TypeError) as e:
            raise UpstreamError(
                f"Could not read a completion from the OpenAI response: {response!r}", backend=self.name
            ) from e
        completion = completion or ""

        self.write_completion(sink, completion)
        return AdapterResult(text=completion, raw=response)


class OpenAIChatEngine(_OpenAIBase):
    """Engine for chat models (``/chat/completions``).

    Each call sends exactly one system message and one user message; no history is kept between calls.
    """

    @staticmethod
    def build_messages(request: InvocationRequest) -> list[dict]:
        return [
            {"role": "system", "content": request.system_prompt},
            {"role": "user", "content": request.prompt},
        ]

    async def complete(self, request: InvocationRequest, sink: OutputSink) -> AdapterResult:
        client = self.ctx.openai_client()

        self.write_framing(request, sink, f"System: {request.system_prompt}\n")
        self.write_framing(request, sink, f"User: {request.prompt}")

        self.logger.debug(f"POST /chat/completions model={request.model}")
        try:
            response = await client.chat.completions.create(
                model=request.model,
                messages=self.build_messages(request),
                timeout=REQUEST_TIMEOUT,
                **self.hyperparams(request),
            )
        except openai.OpenAIError as e:
            raise self.upstream_error(e) from e

        try:
            completion = response.choices[0].message.content
        except (IndexError, AttributeError, TypeError) as e:
            raise UpstreamError(
                f"Could not read a completion from the OpenAI response: {response!r}", backend=self.name
            ) from e
        # content is null for e.g. refusals or tool calls
        completion = completion or ""

        self.write_framing(request, sink, "\nAssistant: ")
        self.write_completion(sink, completion)
        return AdapterResult(text=completion, raw=response)
