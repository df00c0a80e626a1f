"""
scanner.py

Responsibility: Find the commits that bumped the MAJOR version of the tracked checkout.

The input is `git log -U0` output for the version file, with each commit header
printed as `commit:<hash>`. Each `+MAJOR=<n>` diff line is attributed to the
closest header above it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from vbuilder.config import BuildConfig, VersionRange
from vbuilder.process import Runner, run_step

_COMMIT_RE = re.compile(r"commit:(\w+)")
_MAJOR_ADDED_RE = re.compile(r"\+MAJOR=(\d+)")


@dataclass(frozen=True)
class CommitDescriptor:
    commit: str
    major: int


def scan_log(text: str, versions: VersionRange) -> list[CommitDescriptor]:
    """
    Return one descriptor per in-range MAJOR addition, in log order.

    Duplicates are kept: two additions under one header yield two descriptors.
    """
    commits: list[CommitDescriptor] = []
    current: str | None = None
    for line in text.splitlines():
        m = _COMMIT_RE.search(line)
        if m:
            current = m.group(1)
            continue
        m = _MAJOR_ADDED_RE.search(line)
        if m and current is not None:
            major = int(m.group(1))
            if major in versions:
                commits.append(CommitDescriptor(commit=current, major=major))
    return commits


def fetch_version_log(config: BuildConfig, run: Runner = run_step) -> str:
    argv = [
        "git",
        "--no-pager",
        "log",
        "--color=never",
        "--pretty=format:commit:%H",
        "-U0",
        config.ref,
        config.version_file,
    ]
    return run("git log", argv, cwd=config.src_path, capture=True)


def scan_commits(config: BuildConfig, run: Runner = run_step) -> list[CommitDescriptor]:
    return scan_log(fetch_version_log(config, run), config.versions)
