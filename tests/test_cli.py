import io

import pytest
from rich.console import Console

from llmcli import AppContext, BufferSink, TerminalSink
from llmcli._cli import build_parser, main, run_cli
from llmcli.utils.cli import DEFAULT_THEME, FRAMING
from tests.utils import MockOpenAIHandler, api_error, chat_completion, mock_openai_client


# ==== arguments ====
def test_defaults():
    args = build_parser({}).parse_args(["Hello"])
    assert args.prompt == "Hello"
    assert args.model == "gpt-3.5-turbo"
    assert args.temperature == 0
    assert args.system == ""
    assert args.max_tokens is None
    assert args.file is False
    assert args.quiet is True
    assert args.verbose is False


def test_default_model_from_env():
    assert build_parser({"LLM_DEFAULT_MODEL": "bing-precise"}).parse_args(["Hello"]).model == "bing-precise"


def test_short_options():
    args = build_parser({}).parse_args(["-m", "gpt-4", "-t", "0.5", "-s", "sys", "-T", "64", "-f", "-v", "p.txt"])
    assert (args.model, args.temperature, args.system, args.max_tokens, args.file, args.verbose) == (
        "gpt-4",
        0.5,
        "sys",
        64,
        True,
        True,
    )
    assert build_parser({}).parse_args(["--no-quiet", "Hello"]).quiet is False


# ==== run_cli ====
def test_run_chat():
    handler = MockOpenAIHandler({"/chat/completions": (200, chat_completion("Hi there"))})
    ctx = AppContext(env={}, openai_client=mock_openai_client(handler))
    sink = BufferSink()
    assert run_cli(["Hello world"], env={}, ctx=ctx, sink=sink) == 0
    assert sink.getvalue() == "Hi there\n"


def test_run_from_file(tmp_path):
    path = tmp_path / "prompt.txt"
    path.write_text("from a file")
    handler = MockOpenAIHandler({"/chat/completions": (200, chat_completion("ok"))})
    ctx = AppContext(env={}, openai_client=mock_openai_client(handler))
    assert run_cli(["-f", str(path)], env={}, ctx=ctx, sink=BufferSink()) == 0
    (body,) = handler.json_bodies()
    assert body["messages"][1]["content"] == "from a file"


def test_run_missing_cookie(capsys):
    handler = MockOpenAIHandler({})
    ctx = AppContext(env={}, openai_client=mock_openai_client(handler))
    sink = BufferSink()
    assert run_cli(["-m", "bing-creative", "Hello"], env={}, ctx=ctx, sink=sink) == 1
    assert "BING_COOKIE" in capsys.readouterr().err
    assert handler.requests == []
    assert sink.getvalue() == ""


def test_run_upstream_error(capsys):
    handler = MockOpenAIHandler({"/chat/completions": (400, api_error("bad request"))})
    ctx = AppContext(env={}, openai_client=mock_openai_client(handler))
    assert run_cli(["Hello"], env={}, ctx=ctx, sink=BufferSink()) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "bad request" in err


def test_run_missing_prompt_file(tmp_path, capsys):
    assert run_cli(["-f", str(tmp_path / "nope.txt")], env={}, sink=BufferSink()) == 1
    assert "nope.txt" in capsys.readouterr().err


def test_run_undecodable_prompt_file(tmp_path, capsys):
    path = tmp_path / "prompt.txt"
    path.write_bytes(b"\xff\xfe\xfa bad")
    assert run_cli(["-f", str(path)], env={}, sink=BufferSink()) == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_run_no_prompt(capsys):
    assert run_cli([], env={}, sink=BufferSink()) == 1
    assert "usage: llm" in capsys.readouterr().out


def test_run_version(capsys):
    assert run_cli(["-V"], env={}, sink=BufferSink()) == 0
    assert capsys.readouterr().out.startswith("llmcli ")


def test_run_ls():
    model = {"id": "gpt-4", "object": "model", "created": 1687882411, "owned_by": "openai"}
    handler = MockOpenAIHandler({"/models": (200, {"object": "list", "data": [model]})})
    ctx = AppContext(env={}, openai_client=mock_openai_client(handler))
    sink = BufferSink()
    assert run_cli(["ls"], env={}, ctx=ctx, sink=sink) == 0
    out = sink.getvalue()
    assert out.startswith("gpt-4 ")
    assert "bing-creative" in out
    assert out.endswith("huggingface.co/models\n")


def test_run_ls_missing_key(capsys):
    assert run_cli(["ls"], env={}, ctx=AppContext(env={}), sink=BufferSink()) == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().err


def test_main_exits_nonzero_without_cookie(monkeypatch, tmp_path):
    # no .env to pick up a cookie from
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BING_COOKIE", raising=False)
    with pytest.raises(SystemExit) as exc_info:
        main(["-m", "bing-creative", "Hello"])
    assert exc_info.value.code == 1


# ==== sinks ====
def test_terminal_sink_is_literal():
    buf = io.StringIO()
    sink = TerminalSink(Console(file=buf, theme=DEFAULT_THEME, force_terminal=False, width=40))
    sink.write("[bold]User:[/bold] :smile: ", style=FRAMING)
    sink.write("x" * 100 + "\n")
    assert buf.getvalue() == "[bold]User:[/bold] :smile: " + "x" * 100 + "\n"
