from .cli import BufferSink, OutputSink, TerminalSink
from .text import compatible_path, concat_path, escape_shell, relative_date
