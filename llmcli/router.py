"""Map a model name to the one backend responsible for it."""

import enum

from .context import AppContext
from .engines.base import BaseEngine
from .engines.bing import MODEL_PREFIX as BING_PREFIX, BingEngine
from .engines.huggingface import HuggingFaceEngine
from .engines.openai import CHAT_MODELS, COMPLETION_MODELS, OpenAIChatEngine, OpenAICompletionEngine


class Backend(enum.Enum):
    """The finite set of backends a model name can route to."""

    OPENAI_COMPLETION = "openai-completion"
    """OpenAI's legacy /completions endpoint."""

    OPENAI_CHAT = "openai-chat"
    """OpenAI's /chat/completions endpoint."""

    BING = "bing"
    """Bing Chat, through a cookie-authenticated session."""

    HUGGINGFACE = "huggingface"
    """A local script run in a child process. Catches every model name the others don't claim."""


def route(model: str) -> Backend:
    """
    Return the backend for *model*.

    This is a pure function of the model name and never fails: anything that is not a known OpenAI model or a
    ``bing-*`` model is treated as a HuggingFace model ID.
    """
    if model in COMPLETION_MODELS:
        return Backend.OPENAI_COMPLETION
    if model in CHAT_MODELS:
        return Backend.OPENAI_CHAT
    if model.startswith(BING_PREFIX):
        return Backend.BING
    return Backend.HUGGINGFACE


ENGINES: dict[Backend, type[BaseEngine]] = {
    Backend.OPENAI_COMPLETION: OpenAICompletionEngine,
    Backend.OPENAI_CHAT: OpenAIChatEngine,
    Backend.BING: BingEngine,
    Backend.HUGGINGFACE: HuggingFaceEngine,
}
assert set(ENGINES) == set(Backend), "every backend must have an engine"


def create_engine(backend: Backend, ctx: AppContext) -> BaseEngine:
    """Create the engine for *backend*, bound to *ctx*."""
    return ENGINES[backend](ctx)


def engine_for_model(model: str, ctx: AppContext) -> BaseEngine:
    """Convenience: ``create_engine(route(model), ctx)``."""
    return create_engine(route(model), ctx)
