"""Resolve a request, pick its engine, and run it."""

import logging
from pathlib import Path

import pydantic

from .context import AppContext
from .exceptions import PromptError
from .models import InvocationRequest
from .router import route, create_engine
from .utils.cli import OutputSink

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"


def default_model(env) -> str:
    """The model to use when none is given: ``LLM_DEFAULT_MODEL`` if set, otherwise gpt-3.5-turbo."""
    return env.get("LLM_DEFAULT_MODEL") or DEFAULT_MODEL


def resolve_request(
    prompt: str,
    *,
    model: str,
    temperature: float = 0,
    max_tokens: int | None = None,
    system: str = "",
    file: bool = False,
    quiet: bool = True,
    verbose: bool = False,
) -> InvocationRequest:
    """
    Build the request the engines consume.

    :param prompt: The prompt text, or a path to a file containing it if *file* is set.
    :param file: Whether *prompt* is a path to read the prompt from.
    :raises PromptError: The prompt file could not be read, or the resolved prompt is empty.
    """
    if file:
        path = Path(prompt)
        try:
            prompt = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PromptError(f"Could not read prompt file {str(path)!r}: {e.strerror or e}") from e
        except UnicodeDecodeError as e:
            raise PromptError(f"Prompt file {str(path)!r} is not valid UTF-8: {e.reason} at byte {e.start}") from e
        log.debug(f"Read {len(prompt)} characters of prompt from {path}")

    try:
        return InvocationRequest(
            prompt=prompt,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            system_prompt=system,
            quiet=quiet,
            verbose=verbose,
        )
    except pydantic.ValidationError as e:
        if any(err["loc"] == ("prompt",) for err in e.errors()):
            raise PromptError("The prompt is empty. Pass some text, or a non-empty file with --file.") from e
        raise PromptError(f"Invalid request: {e}") from e


async def use_llm(request: InvocationRequest, ctx: AppContext, sink: OutputSink) -> str:
    """
    Send *request* to the engine its model routes to and return the completion.

    Errors from the engine propagate unchanged; deciding what to do with them (e.g. the exit status) is up to the
    caller.
    """
    backend = route(request.model)
    engine = create_engine(backend, ctx)
    log.debug(f"Routed model {request.model!r} to {backend.value}: {engine!r}")
    return await engine.invoke(request, sink)
