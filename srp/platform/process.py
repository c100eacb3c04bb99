"""Subprocess calls for the bundler command and `git rev-parse`.

Both helpers return a Result; nothing here raises for a failing command.

    match run(["git", "rev-parse", "HEAD"], cwd=Path(".")):
        case Ok(stdout):
            release = stdout.strip()
        case Err(error):
            console.warning(str(error))
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from srp.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]

_SHOWN_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started or exited non-zero.

    `returncode` is -1 when the process never ran or was killed on timeout;
    `stderr` then holds the reason.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _execute(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    capture: bool,
) -> Result[subprocess.CompletedProcess[str], ProcessError]:
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        reason = f"Command timed out after {timeout}s"
        return Err(ProcessError(command=command, returncode=-1, stdout="", stderr=reason))
    except OSError as e:
        return Err(ProcessError(command=command, returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=command,
                returncode=proc.returncode,
                stdout=proc.stdout or "",
                stderr=proc.stderr or "",
            )
        )
    return Ok(proc)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run cmd in cwd and return its captured stdout.

    Args:
        env: Full environment for the child; None inherits ours.
        timeout: Seconds before the process is killed.
    """
    result = _execute(cmd, cwd, env, timeout, capture=True)
    if isinstance(result, Err):
        return result
    return Ok(result.value.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run cmd with output going straight to the terminal.

    Bundlers print their own progress; only the exit status is kept.
    """
    result = _execute(cmd, cwd, env, timeout, capture=False)
    if isinstance(result, Err):
        return result
    return Ok(None)
