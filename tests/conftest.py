from __future__ import annotations

import logging
from pathlib import Path

import pytest

from vbuilder.config import BuildConfig, config_from_dict
from vbuilder.process import StepFailedError, StepSignaledError

VERSION_TEXT = "MAJOR=35\nMINOR=0\nBUILD=1\nPATCH=2\n"

HEAD_LOG = (
    "0123456789abcdef0123456789abcdef01234567\n"
    "2014-05-01 12:34:56 -0700\n"
    "Roll WebKit.\n"
    "\n"
    "Review URL: https://codereview.example.org/123\n"
    "\n"
    "Cr-Commit-Position: refs/heads/master@{#12345}\n"
)


class FakeRunner:
    """Records every command; can fail or be "killed" at a given step."""

    def __init__(
        self,
        config: BuildConfig | None = None,
        *,
        outputs: dict[str, str] | None = None,
        fail: str | None = None,
        kill: str | None = None,
        produce_artifact: bool = True,
    ) -> None:
        self.config = config
        self.outputs = outputs or {}
        self.fail = fail
        self.kill = kill
        self.produce_artifact = produce_artifact
        self.calls: list[tuple[str, list[str]]] = []

    def __call__(self, step: str, argv: list[str], *, cwd: Path, capture: bool = False) -> str:
        self.calls.append((step, list(argv)))
        if step == self.fail:
            raise StepFailedError(step, argv, 1)
        if step == self.kill:
            raise StepSignaledError(step, argv, 9)
        if argv[0] == "ninja" and self.produce_artifact and self.config is not None:
            artifact = self.config.artifact_path
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(b"apk for " + self.config.gyp_env_path.read_bytes())
        return self.outputs.get(step, "")

    @property
    def steps(self) -> list[str]:
        return [step for step, _argv in self.calls]


@pytest.fixture
def checkout(tmp_path: Path) -> BuildConfig:
    """A fake gclient root: `src/chrome/VERSION` plus a config pointing at it."""
    version = tmp_path / "src" / "chrome" / "VERSION"
    version.parent.mkdir(parents=True)
    version.write_text(VERSION_TEXT, encoding="utf-8")
    return config_from_dict({"archs": ["arm", "arm64", "ia32", "x64"]}, base_dir=tmp_path)


@pytest.fixture
def runner(checkout: BuildConfig) -> FakeRunner:
    return FakeRunner(checkout, outputs={"git log -1": HEAD_LOG})


@pytest.fixture(autouse=True)
def _reset_logging():
    # The CLI binds a handler to whatever sys.stdout was during that test.
    yield
    logger = logging.getLogger("vbuilder")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
