import asyncio
import os
import sys

from llmcli.exceptions import UpstreamError
from llmcli.models import AdapterResult, InvocationRequest
from llmcli.utils.cli import OutputSink
from llmcli.utils.text import concat_path, escape_shell
from ..base import BaseEngine


class HuggingFaceEngine(BaseEngine):
    """Engine that runs a local script in a child process, passing the model ID through to it.

    The script (by default, the bundled ``use.py``) is called as ``<script> --model <model> --prompt <prompt>`` and
    must print the completion to stdout. Its combined stdout and stderr are copied verbatim to this process's stdout,
    separately from the sink.
    """

    name = "huggingface"

    def __init__(self, ctx, python: str = None):
        """
        :param ctx: The run's context. ``ctx.local_script`` is the script to run.
        :param python: The interpreter to run the script with (default: the current interpreter).
        """
        super().__init__(ctx)
        self.python = python or sys.executable or "python"

    def build_command(self, request: InvocationRequest) -> str:
        script_dir, script_name = os.path.split(self.ctx.local_script)
        script = concat_path(script_dir, script_name)
        return (
            f'"{escape_shell(self.python)}" "{escape_shell(script)}"'
            f' --model "{escape_shell(request.model)}" --prompt "{escape_shell(request.prompt)}"'
        )

    async def complete(self, request: InvocationRequest, sink: OutputSink) -> AdapterResult:
        self.write_framing(request, sink, request.prompt)

        cmd = self.build_command(request)
        self.logger.debug(f"Running: {cmd}")
        try:
            proc = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=os.path.dirname(self.ctx.local_script) or None,
            )
            stdout, _ = await proc.communicate()
        except OSError as e:
            self.logger.warning(f"Could not start {cmd}: {e}")
            raise UpstreamError(f"Could not start the local model script: {e}", backend=self.name) from e

        output = stdout.decode("utf-8", errors="replace")
        if proc.returncode:
            self.logger.warning(f"{cmd} exited with status {proc.returncode}\n{output}")
            raise UpstreamError(
                f"Command failed with exit status {proc.returncode}: {cmd}\n{output}", backend=self.name
            )

        out = self.ctx.stdout or sys.stdout
        out.write(output)
        out.flush()
        return AdapterResult(text=output, raw={"returncode": proc.returncode, "output": output})

    def __repr__(self):
        return f"{type(self).__name__}(script={self.ctx.local_script!r}, python={self.python!r})"
