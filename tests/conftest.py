import io

import pytest

from llmcli import AppContext, BufferSink
from tests.utils import ECHO_SCRIPT, FAILING_SCRIPT


@pytest.fixture
def sink():
    """An output sink that keeps everything written to it."""
    return BufferSink()


@pytest.fixture
def echo_script(tmp_path):
    """A local model script that prints its --model and --prompt arguments as JSON."""
    path = tmp_path / "use.py"
    path.write_text(ECHO_SCRIPT)
    return str(path)


@pytest.fixture
def failing_script(tmp_path):
    path = tmp_path / "broken.py"
    path.write_text(FAILING_SCRIPT)
    return str(path)


@pytest.fixture
def local_ctx(echo_script):
    """A context with no credentials that runs the echo script and captures its stdout."""
    return AppContext(env={}, local_script=echo_script, stdout=io.StringIO())
