"""Child-process execution for vendor tools.

Every invocation is bounded by a timeout, and the child is killed and
reaped on all exit paths (timeout, KeyboardInterrupt, any other error) so
a cancelled query never leaves an orphaned vendor tool behind.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from gpuprobe.errors import QueryError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass
class CommandResult:
    """Captured outcome of one finished child process."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    command: Sequence[str],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """Run a command and capture its text output.

    Args:
        command: argv list (no shell)
        timeout: Seconds to wait before the child is killed
        env: Extra environment variables layered over os.environ

    Returns:
        CommandResult, whatever the exit status

    Raises:
        QueryError: If the command cannot be spawned or times out
    """
    argv = list(command)
    child_env = {**os.environ, **env} if env else None
    logger.debug("Running %s (timeout=%ss)", " ".join(argv), timeout)
    try:
        proc = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            env=child_env,
        )
    except OSError as exc:
        raise QueryError(f"Failed to run {argv[0]}: {exc}", command=argv) from exc

    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            proc.kill()
            proc.communicate()
            raise QueryError(
                f"{argv[0]} timed out after {timeout}s", command=argv
            ) from exc
        except BaseException:
            proc.kill()
            proc.wait()
            raise

    return CommandResult(
        command=argv,
        returncode=proc.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
    )


def run_tool(config, command: Sequence[str], timeout: Optional[float] = None) -> str:
    """Run a vendor tool through the configured runner and return its stdout.

    Raises:
        QueryError: On spawn failure, timeout, or non-zero exit status
    """
    argv = list(command)
    result = config.runner(
        argv,
        config.timeout_seconds if timeout is None else timeout,
        config.env,
    )
    if not result.ok:
        detail = (result.stderr or result.stdout or "").strip()
        message = f"{argv[0]} exited with status {result.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise QueryError(message, command=argv, returncode=result.returncode)
    return result.stdout
