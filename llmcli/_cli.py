"""
Main CLI entrypoint.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from .catalog import HUGGINGFACE_NOTE, format_catalog, list_models
from .context import AppContext
from .dispatch import default_model, resolve_request, use_llm
from .exceptions import ConfigurationError, LLMException
from .utils.cli import FRAMING, OutputSink, TerminalSink

log = logging.getLogger("llmcli")

CLI_EXAMPLES = (
    "examples:\n"
    '  llm "Write a haiku about tea"\n'
    '  llm -m gpt-4o -s "You are a pirate." --no-quiet "Hello!"\n'
    '  llm -m text-davinci-003 -T 64 "Once upon a time"\n'
    '  llm -m bing-creative "Plan a weekend in Lisbon"\n'
    '  llm -m gpt2 "The meaning of life is"\n'
    "  llm -f ./prompt.txt\n"
    "  llm ls"
)
RESERVED_FLAGS = ("plugins", "chain", "interpret")


def setup_logging(verbose: bool = False, env: Mapping[str, str] = None):
    """DEBUG if *verbose* or ``LLMCLI_DEBUG`` is set; ``LLMCLI_DEBUG_LOGGERS=a,b`` debugs only the named loggers."""
    env = os.environ if env is None else env
    if verbose or env.get("LLMCLI_DEBUG") is not None:
        logging.basicConfig(level=logging.DEBUG)
    elif env.get("LLMCLI_DEBUG_LOGGERS") is not None:
        logging.basicConfig(level=logging.INFO)
        for logger in env["LLMCLI_DEBUG_LOGGERS"].split(","):
            logging.getLogger(logger).setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm",
        description=(
            "Use large language models from your terminal.\n\n"
            "The model decides the backend:\n"
            "* OpenAI completion models (e.g. text-davinci-003, gpt-3.5-turbo-instruct)\n"
            "* OpenAI chat models (e.g. gpt-3.5-turbo, gpt-4o)\n"
            "* bing-creative, bing-balanced, bing-precise (Bing Chat)\n"
            "* anything else is run locally as a HuggingFace model ID\n\n"
            "Use `llm ls` to list known models."
        ),
        epilog=CLI_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("prompt", nargs="?", help="the prompt (or a path to it, with --file)")
    parser.add_argument("-m", "--model", default=default_model(env), help="text-davinci-003, bing-creative, ...")
    parser.add_argument("-t", "--temperature", type=float, default=0, help="sampling temperature (default 0)")
    parser.add_argument("-s", "--system", default="", help="system prompt (chat models only)")
    parser.add_argument("-T", "--max-tokens", type=int, default=None, help="maximum number of tokens to generate")
    parser.add_argument("-f", "--file", action="store_true", help="read the prompt from the file at <prompt>")
    parser.add_argument(
        "-q", "--quiet", action=argparse.BooleanOptionalAction, default=True, help="print only the completion"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose (debug) output")
    parser.add_argument("-P", "--plugins", action="store_true", help="use plugins (reserved)")
    parser.add_argument("-C", "--chain", action="store_true", help="use chaining (reserved)")
    parser.add_argument("-I", "--interpret", action="store_true", help="use interpreter (reserved)")
    parser.add_argument("-V", "--version", action="store_true", help="show version and exit")
    return parser


def print_version():
    """Entrypoint for llm --version"""
    from ._version import __version__

    print(f"llmcli {__version__}")
    print(f"Python {sys.version} on {sys.platform}")


# ==== commands ====
async def prompt_command(args: argparse.Namespace, ctx: AppContext, sink: OutputSink) -> str:
    for flag in RESERVED_FLAGS:
        if getattr(args, flag):
            log.warning(f"--{flag} is reserved and not implemented yet; ignoring it.")
    request = resolve_request(
        args.prompt,
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        system=args.system,
        file=args.file,
        quiet=args.quiet,
        verbose=args.verbose,
    )
    try:
        return await use_llm(request, ctx, sink)
    finally:
        await ctx.close()


async def ls_command(ctx: AppContext, sink: OutputSink):
    try:
        entries = await list_models(ctx)
    finally:
        await ctx.close()
    sink.write(format_catalog(entries) + "\n")
    sink.write(f"\n{HUGGINGFACE_NOTE}\n", style=FRAMING)


# ==== main ====
def run_cli(argv: list[str], *, env: Mapping[str, str] = None, ctx: AppContext = None, sink: OutputSink = None) -> int:
    """
    Run the CLI with the given arguments and return the process exit status.

    This is the single place where errors are turned into an exit status: any :class:`.LLMException` is printed to
    stderr and results in status 1.
    """
    env = os.environ if env is None else env
    ctx = ctx or AppContext(env)
    sink = sink or TerminalSink()

    if argv[:1] == ["ls"]:
        setup_logging("-v" in argv or "--verbose" in argv, env)
        coro = ls_command(ctx, sink)
    else:
        parser = build_parser(env)
        args = parser.parse_args(argv)
        if args.version:
            print_version()
            return 0
        if not args.prompt:
            parser.print_help()
            return 1
        setup_logging(args.verbose, env)
        coro = prompt_command(args, ctx, sink)

    try:
        asyncio.run(coro)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return 1
    except LLMException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


def main(argv: list[str] = None):
    """The main CLI entrypoint."""
    # real environment variables take precedence over .env
    load_dotenv(find_dotenv(usecwd=True))
    if argv is None:
        argv = sys.argv[1:]
    sys.exit(run_cli(argv))
