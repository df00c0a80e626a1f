"""
commit_info.py

Responsibility: Describe the current checkout (version numbers, HEAD commit, commit position).

Reading is split in two phases so the parsing can be tested without git:
- `parse_version_file` / `parse_head_log` are pure functions over text
- `read_commit_info` reads the file and runs `git log -1`, then composes the result
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from vbuilder.config import BuildConfig
from vbuilder.process import Runner, run_step

logger = logging.getLogger(__name__)

VERSION_KEYS = ("MAJOR", "MINOR", "BUILD", "PATCH")

_POSITION_RE = re.compile(r"Cr-Commit-Position:\s+(.+@\{#(\d+)\})")

# `git log --pretty=%ai`: ISO-8601-like author date, e.g. "2014-05-01 12:34:56 -0700".
_AUTHOR_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


class CommitInfoError(ValueError):
    exit_code = 2


class VersionFileError(CommitInfoError):
    pass


@dataclass(frozen=True)
class VersionInfo:
    major: str
    minor: str
    build: str
    patch: str
    commit_hash: str
    author_date: datetime
    commit_position: str | None = None
    commit_position_number: int | None = None

    @property
    def version(self) -> str:
        """`MAJOR.MINOR.BUILD.PATCH`, plus `@{#N}` when the commit position is known."""
        rev = f"{self.major}.{self.minor}.{self.build}.{self.patch}"
        if self.commit_position_number is not None:
            rev += f"@{{#{self.commit_position_number}}}"
        return rev


@dataclass(frozen=True)
class HeadCommit:
    commit_hash: str
    author_date: datetime
    commit_position: str | None = None
    commit_position_number: int | None = None


def parse_version_file(text: str) -> dict[str, str]:
    """
    Parse `KEY=VALUE` lines; blanks inside lines are ignored, as are unknown keys.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    values: dict[str, str] = {}
    for raw in normalized.split("\n"):
        line = raw.replace(" ", "").replace("\t", "")
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        if key in VERSION_KEYS:
            values[key] = value
    missing = [k for k in VERSION_KEYS if not values.get(k)]
    if missing:
        raise VersionFileError(f"Version file is missing {', '.join(missing)}")
    return values


def parse_head_log(text: str) -> HeadCommit:
    """
    Parse `git log -1 --pretty=format:%H%n%ai%n%b` output.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    if len(lines) < 2 or not lines[0].strip():
        raise CommitInfoError("git log output does not contain a commit hash and author date")

    commit_hash = lines[0].strip()
    try:
        author_date = datetime.strptime(lines[1].strip(), _AUTHOR_DATE_FORMAT)
    except ValueError as e:
        raise CommitInfoError(f"Unrecognized author date: {lines[1]!r}") from e

    for line in lines[2:]:
        m = _POSITION_RE.search(line)
        if m:
            return HeadCommit(
                commit_hash=commit_hash,
                author_date=author_date,
                commit_position=m.group(1),
                commit_position_number=int(m.group(2)),
            )
    return HeadCommit(commit_hash=commit_hash, author_date=author_date)


def version_info(version: dict[str, str], head: HeadCommit) -> VersionInfo:
    return VersionInfo(
        major=version["MAJOR"],
        minor=version["MINOR"],
        build=version["BUILD"],
        patch=version["PATCH"],
        commit_hash=head.commit_hash,
        author_date=head.author_date,
        commit_position=head.commit_position,
        commit_position_number=head.commit_position_number,
    )


def read_version_file(path: Path) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise VersionFileError(f"Version file can't be read: {path}") from e
    return parse_version_file(text)


def fetch_head_log(src_path: Path, run: Runner = run_step) -> str:
    argv = ["git", "log", "-1", "--pretty=format:%H%n%ai%n%b"]
    return run("git log -1", argv, cwd=src_path, capture=True)


def read_commit_info(config: BuildConfig, run: Runner = run_step) -> VersionInfo:
    info = version_info(read_version_file(config.version_path), parse_head_log(fetch_head_log(config.src_path, run)))
    logger.info("Checked out %s (%s, %s)", info.version, info.commit_hash, info.author_date.isoformat())
    return info
