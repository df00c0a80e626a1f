"""
checkout.py

Responsibility: Walk a queue of commits, checking each one out and building it.

Per commit (each step is one external command, run to completion):
  git reset -> git clean -> git checkout <commit>
  -> gclient recurse git reset -> gclient recurse git clean -> gclient sync --nohooks
  -> build pass (all architectures)

The main tree is reset and cleaned before every checkout, including the first;
when the queue is empty that cleanup is all that happens.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable
from pathlib import Path

from vbuilder.build_pass import build_checkout
from vbuilder.config import BuildConfig
from vbuilder.process import Runner, run_logged_step, run_step
from vbuilder.scanner import CommitDescriptor

logger = logging.getLogger(__name__)

BuildFn = Callable[..., list[Path]]


class CheckoutLoop:
    def __init__(
        self,
        config: BuildConfig,
        commits: Iterable[CommitDescriptor],
        *,
        run: Runner = run_step,
        build: BuildFn = build_checkout,
    ) -> None:
        self.config = config
        self.commits: deque[CommitDescriptor] = deque(commits)
        self._run = run
        self._build = build

    def _step(self, step: str, argv: list[str]) -> None:
        run_logged_step(self._run, step, argv, cwd=self.config.src_path, where=self.config.src_dir)

    def reset_worktree(self) -> None:
        self._step("git reset", ["git", "reset", "-q", "--hard", "HEAD"])

    def clean_worktree(self) -> None:
        self._step("git clean", ["git", "clean", "-fdq"])

    def checkout_next(self) -> CommitDescriptor:
        commit = self.commits.popleft()
        logger.info("Checking out %s (MAJOR=%d)", commit.commit, commit.major)
        self._step("git checkout", ["git", "checkout", commit.commit])
        return commit

    def reset_dependencies(self) -> None:
        self._step("gclient recurse git reset", ["gclient", "recurse", "git", "reset", "-q", "--hard", "HEAD"])

    def clean_dependencies(self) -> None:
        self._step("gclient recurse git clean", ["gclient", "recurse", "git", "clean", "-dfq"])

    def sync_dependencies(self) -> None:
        self._step("gclient sync", ["gclient", "sync", "--nohooks"])

    def run(self) -> int:
        """Build every queued commit; returns how many were built."""
        built = 0
        self.reset_worktree()
        self.clean_worktree()
        if not self.commits:
            logger.info("No commits to build")
            return built

        while True:
            commit = self.checkout_next()
            self.reset_dependencies()
            self.clean_dependencies()
            self.sync_dependencies()
            artifacts = self._build(self.config, run=self._run)
            built += 1
            logger.info(
                "Built %s: %d artifact(s)", commit.commit, len(artifacts), extra={"color": "green"}
            )
            if not self.commits:
                return built
            self.reset_worktree()
            self.clean_worktree()
