"""
process.py

Responsibility: Spawn external commands (git, gclient, ninja) one at a time.

This module must be the only place that:
- Calls `subprocess.run`
- Interprets exit statuses (nonzero exit vs. termination by a signal)

Everything else passes a `run` callable around so that tests can substitute a fake.
"""

from __future__ import annotations

import logging
import signal
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class StepError(RuntimeError):
    """A pipeline step could not complete."""

    exit_code = 1

    def __init__(self, step: str, argv: list[str], message: str) -> None:
        super().__init__(message)
        self.step = step
        self.argv = list(argv)


class StepFailedError(StepError):
    def __init__(self, step: str, argv: list[str], returncode: int, output: str | None = None) -> None:
        message = f"{step} failed (exit code {returncode})"
        if output:
            message += f"\n\n{output}"
        super().__init__(step, argv, message)
        self.returncode = returncode


class StepSignaledError(StepError):
    def __init__(self, step: str, argv: list[str], signum: int) -> None:
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = f"signal {signum}"
        super().__init__(step, argv, f"{step} was terminated by {name}")
        self.signum = signum


class Runner(Protocol):
    def __call__(self, step: str, argv: list[str], *, cwd: Path, capture: bool = False) -> str: ...


def run_step(step: str, argv: list[str], *, cwd: Path, capture: bool = False) -> str:
    """
    Run one external command to completion and return its stdout.

    stdout is only captured (and returned) when `capture` is set; otherwise the
    child inherits the terminal and "" is returned. stderr is always passed through.
    """
    logger.debug("Running %s in %s", " ".join(argv), cwd)
    if not Path(cwd).is_dir():
        raise StepFailedError(step, argv, 127, f"working directory does not exist: {cwd}")
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            stdin=subprocess.DEVNULL if capture else None,
            stdout=subprocess.PIPE if capture else None,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise StepFailedError(step, argv, 127, f"{argv[0]}: command not found") from e
    except OSError as e:
        raise StepFailedError(step, argv, 126, f"{argv[0]}: {e.strerror or e}") from e

    if proc.returncode < 0:
        raise StepSignaledError(step, argv, -proc.returncode)
    if proc.returncode:
        raise StepFailedError(step, argv, proc.returncode)
    return proc.stdout if capture else ""


def run_logged_step(run: Runner, step: str, argv: list[str], *, cwd: Path, where: str) -> None:
    """Run a pass-through step between colored "Starting"/"Ended" status lines."""
    logger.info("Starting '%s' in '%s'", step, where, extra={"color": "blue"})
    run(step, argv, cwd=cwd)
    logger.info("Ended '%s' in '%s'", step, where, extra={"color": "green"})
