"""Subprocess-based command execution for a single task directory."""

from __future__ import annotations

import logging
import subprocess

from gloc.models import CompletionEvent, Task

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Run a task command in its directory and capture combined output.

    String commands go verbatim to a shell so quoting behaves as typed;
    tuple commands are executed directly. Failing to spawn is reported as a
    failed event, never raised, so sibling tasks are unaffected.
    """

    def __init__(self, *, shell: str | None = None) -> None:
        self.shell = shell

    def run(self, task: Task) -> CompletionEvent:
        use_shell = isinstance(task.command, str)
        run_args = task.command if use_shell else list(task.command)
        try:
            completed = subprocess.run(  # noqa: S603
                run_args,
                cwd=task.path,
                shell=use_shell,  # noqa: S604
                executable=self.shell if use_shell else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as error:
            logger.debug("Could not start command in %s: %s", task.path, error)
            return CompletionEvent(path=task.path, succeeded=False, output=str(error))

        output, decoded = _decode_output(completed.stdout)
        if not decoded:
            logger.debug("Non UTF-8 output from %s", task.path)
        logger.debug("Command in %s exited with %s", task.path, completed.returncode)
        return CompletionEvent(
            path=task.path,
            succeeded=completed.returncode == 0 and decoded,
            output=output,
            exit_code=completed.returncode,
        )


def _decode_output(raw: bytes | None) -> tuple[str, bool]:
    if not raw:
        return "", True
    try:
        return raw.decode("utf-8"), True
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace"), False
