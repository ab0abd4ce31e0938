"""Output sinks decouple engines from the terminal so that their output can be captured."""

import abc
import io

from rich.console import Console
from rich.theme import Theme

FRAMING = "framing"
"""The style name engines use for anything that is not the completion itself (prompt echo, role labels)."""

DEFAULT_THEME = Theme({FRAMING: "bright_black"})


class OutputSink(abc.ABC):
    """Somewhere for an engine to write text as soon as it has it."""

    @abc.abstractmethod
    def write(self, text: str, style: str | None = None):
        """
        Write *text* as-is (no newline is added).

        :param style: An optional style name (e.g. :data:`FRAMING`). Sinks may ignore it.
        """
        raise NotImplementedError


class TerminalSink(OutputSink):
    """Write to stdout using rich. Framing text is dimmed when the output is a color-capable terminal."""

    def __init__(self, console: Console = None):
        self.console = console or Console(theme=DEFAULT_THEME, highlight=False)

    def write(self, text: str, style: str | None = None):
        # completions can contain anything, so never interpret rich markup or emoji codes, or wrap lines
        self.console.print(text, style=style, end="", markup=False, emoji=False, highlight=False, soft_wrap=True)
        self.console.file.flush()


class BufferSink(OutputSink):
    """Collect everything written in memory. Styles are recorded but otherwise ignored."""

    def __init__(self):
        self._buf = io.StringIO()
        self.writes: list[tuple[str, str | None]] = []

    def write(self, text: str, style: str | None = None):
        self._buf.write(text)
        self.writes.append((text, style))

    def getvalue(self) -> str:
        """Everything written so far, concatenated."""
        return self._buf.getvalue()

    def __str__(self):
        return self.getvalue()
