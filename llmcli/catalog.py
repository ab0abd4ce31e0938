"""The model list shown by ``llm ls``: OpenAI's live model listing merged with the built-in table."""

import datetime
import logging

import openai

from .context import AppContext
from .exceptions import UpstreamError
from .models import ModelCatalogEntry
from .utils.text import relative_date

log = logging.getLogger(__name__)

# id -> (author, description)
BUILTIN_MODELS = {
    # openai completion
    "gpt-3.5-turbo-instruct": ("openai", "GPT-3.5 instruction-following completion model"),
    "davinci-002": ("openai", "GPT base model for completions"),
    "babbage-002": ("openai", "small GPT base model for completions"),
    # openai chat
    "gpt-3.5-turbo": ("openai", "fast, inexpensive chat model"),
    "gpt-4": ("openai", "GPT-4 chat model"),
    "gpt-4-turbo": ("openai", "GPT-4 Turbo chat model with a 128k context"),
    "gpt-4o": ("openai", "multimodal flagship chat model"),
    "gpt-4o-mini": ("openai", "small, fast multimodal chat model"),
    # bing
    "bing-creative": ("microsoft", "Bing Chat, creative conversation style"),
    "bing-balanced": ("microsoft", "Bing Chat, balanced conversation style"),
    "bing-precise": ("microsoft", "Bing Chat, precise conversation style"),
    # huggingface
    "gpt2": ("openai-community", "GPT-2 run locally with transformers"),
}

HUGGINGFACE_NOTE = "note: plus any text-generation model from huggingface.co/models"


async def fetch_openai_models(ctx: AppContext) -> list[ModelCatalogEntry]:
    """List the models available to the configured OpenAI API key."""
    client = ctx.openai_client()
    try:
        page = await client.models.list()
    except openai.OpenAIError as e:
        log.warning(f"Could not list OpenAI models: {e}")
        raise UpstreamError(f"OpenAI returned an error: {e}", backend="openai") from e
    return [
        ModelCatalogEntry(
            id=m.id,
            created_at=datetime.datetime.fromtimestamp(m.created, tz=datetime.timezone.utc) if m.created else None,
            author=getattr(m, "owned_by", None) or "",
        )
        for m in page.data
    ]


def merge_catalog(live: list[ModelCatalogEntry], builtin: dict = None) -> list[ModelCatalogEntry]:
    """
    Sort the live entries oldest first, fill in descriptions from the built-in table, then append any built-in models
    the live listing doesn't have.
    """
    if builtin is None:
        builtin = BUILTIN_MODELS
    utc_min = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)
    entries = []
    for entry in sorted(live, key=lambda e: e.created_at or utc_min):
        if entry.id in builtin:
            author, description = builtin[entry.id]
            entry = entry.copy_with(author=entry.author or author, description=description)
        entries.append(entry)

    seen = {e.id for e in entries}
    for model_id, (author, description) in builtin.items():
        if model_id not in seen:
            entries.append(ModelCatalogEntry(id=model_id, author=author, description=description))
    return entries


def format_catalog(entries: list[ModelCatalogEntry], now: datetime.datetime = None) -> str:
    """One line per model: the ID padded to 36 columns, then how long ago it was created (if known)."""
    lines = []
    for entry in entries:
        age = relative_date(entry.created_at, now=now) if entry.created_at else ""
        lines.append(f"{entry.id:<36} {age}".rstrip())
    return "\n".join(lines)


async def list_models(ctx: AppContext) -> list[ModelCatalogEntry]:
    """The full, merged catalog."""
    return merge_catalog(await fetch_openai_models(ctx))
