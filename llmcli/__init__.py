from . import engines, exceptions, utils
from ._version import __version__
from .context import AppContext
from .dispatch import resolve_request, use_llm
from .models import AdapterResult, BingVariant, InvocationRequest, ModelCatalogEntry
from .router import Backend, create_engine, engine_for_model, route
from .utils.cli import BufferSink, OutputSink, TerminalSink
