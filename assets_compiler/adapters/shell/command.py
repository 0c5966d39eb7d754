"""
Process executor — run package-manager commands and stream their output.

This is the single place where the compiler spawns processes. Commands
are shell strings (``yarn upgrade``, ``npm run build -- --mode prod``),
run in the package directory with stdout and stderr merged and streamed
line by line to an output sink as they arrive.

There is no timeout: a hung process blocks the run.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

OutputSink = Callable[[str, str], None]

STDOUT = "out"


def log_sink(stream: str, chunk: str) -> None:
    """Default sink: the verbose (INFO) log."""
    logger.info("    %s", chunk)


class ProcessExecutor:
    """Blocking command execution with streamed, merged output."""

    def execute(
        self,
        command: str,
        output_sink: OutputSink | None = None,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run ``command`` and return its exit code. 0 is the only success."""
        sink = output_sink or log_sink

        proc_env = os.environ.copy()
        if env:
            proc_env.update({key: str(value) for key, value in env.items()})

        logger.debug("Executing: %s (cwd=%s)", command, cwd)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                cwd=cwd,
                env=proc_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            sink(STDOUT, f"Could not start '{command}': {e}")
            return 127

        with proc:
            if proc.stdout:
                for line in proc.stdout:
                    sink(STDOUT, line.rstrip())
            proc.wait()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("'%s' exited with %d after %dms", command, proc.returncode, elapsed_ms)
        return proc.returncode
