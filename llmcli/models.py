"""Backend-agnostic classes used to represent a single invocation and its result."""

import datetime
import enum
from typing import Any

from pydantic import BaseModel as PydanticBase, ConfigDict, field_validator


class BaseModel(PydanticBase):
    """The base class for all llmcli models."""

    def copy_with(self, **new_values):
        """Make a shallow copy of this object, updating the passed attributes (if any) to new values.
        This does not validate the updated attributes!
        This is mostly just a convenience wrapper around ``.model_copy``.
        """
        return self.model_copy(update=new_values)


# ==== invocation ====
class InvocationRequest(BaseModel):
    """A fully resolved request to send to exactly one engine."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    """The text to complete. Never empty."""

    model: str = "gpt-3.5-turbo"
    """The model identifier. The router maps this to exactly one engine."""

    temperature: float = 0
    """Sampling temperature, for engines that support it."""

    max_tokens: int | None = None
    """The maximum number of tokens to generate, for engines that support it. None uses the backend default."""

    system_prompt: str = ""
    """The system message, for engines that support it."""

    quiet: bool = True
    """If True, only the completion is printed (no echo of the prompt or role labels)."""

    verbose: bool = False
    """If True, debug logging is enabled for the run."""

    @field_validator("prompt")
    @classmethod
    def _prompt_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("prompt must not be empty")
        return v


class AdapterResult(BaseModel):
    """The result of a single engine call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str
    """The completion text. This is the only field guaranteed to be meaningful for every engine."""

    raw: Any = None
    """The provider-specific response (e.g. an OpenAI response object or a Bing final frame)."""


# ==== bing ====
class BingVariant(enum.Enum):
    """The conversation style to request from Bing Chat."""

    CREATIVE = "Creative"
    BALANCED = "Balanced"
    PRECISE = "Precise"


# ==== catalog ====
class ModelCatalogEntry(BaseModel):
    """A model that ``llm ls`` knows about, either from the built-in table or from a provider listing."""

    id: str
    created_at: datetime.datetime | None = None
    author: str = ""
    description: str = ""
