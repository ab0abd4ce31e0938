from llmcli.models import AdapterResult, BingVariant, InvocationRequest
from llmcli.utils.cli import OutputSink
from ..base import BaseEngine

MODEL_PREFIX = "bing-"

MODEL_VARIANTS = {
    "bing-creative": BingVariant.CREATIVE,
    "bing-precise": BingVariant.PRECISE,
}


def variant_for_model(model: str) -> BingVariant:
    """``bing-creative`` and ``bing-precise`` select their styles; any other ``bing-*`` model is Balanced."""
    return MODEL_VARIANTS.get(model, BingVariant.BALANCED)


class BingEngine(BaseEngine):
    """Engine for Bing Chat, using the session owned by the run's :class:`.AppContext`.

    Temperature, max tokens, and the system prompt are not supported and are ignored.
    """

    name = "bing"

    async def complete(self, request: InvocationRequest, sink: OutputSink) -> AdapterResult:
        session = self.ctx.bing_session()
        variant = variant_for_model(request.model)

        self.write_framing(request, sink, f"User: {request.prompt}")

        self.logger.debug(f"Sending message to Bing (variant={variant.value})")
        completion, final = await session.send_message(request.prompt, variant=variant)

        self.write_framing(request, sink, "\nBing: ")
        self.write_completion(sink, completion)
        return AdapterResult(text=completion, raw=final)
