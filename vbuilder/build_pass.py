"""
build_pass.py

Responsibility: Build the current checkout once per architecture and archive each artifact.

For every architecture, strictly in order:
1) Remove the build output directory
2) Write `chromium.gyp_env` selecting the target OS/arch, then `gclient runhooks`
3) `ninja -C <out_dir> <target>`
4) Copy the artifact to `<release_dir>/<version>/<stem>_<version>_<arch><ext>`
   and stamp it with the commit's author date

The output directory is shared by all architectures, which is why they never
build in parallel.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections import deque
from pathlib import Path

from vbuilder.commit_info import VersionInfo, read_commit_info
from vbuilder.config import BuildConfig
from vbuilder.process import Runner, run_step
from vbuilder.renderer import read_target_arch, write_gyp_env

logger = logging.getLogger(__name__)


class ArtifactError(RuntimeError):
    exit_code = 1


def release_dir_for(config: BuildConfig, info: VersionInfo) -> Path:
    return config.release_path / info.version


def artifact_name(config: BuildConfig, info: VersionInfo, arch: str) -> str:
    """e.g. `ContentShell_35.0.1916.2@{#12345}_arm.apk`"""
    artifact = Path(config.build.artifact)
    return f"{artifact.stem}_{info.version}_{arch}{artifact.suffix}"


def _stamp(path: Path, info: VersionInfo) -> None:
    ts = info.author_date.timestamp()
    try:
        os.utime(path, (ts, ts))
    except OSError as e:
        raise ArtifactError(f"Can't set the timestamp of '{path}': {e.strerror or e}") from e


class BuildPass:
    """
    Builds one checkout for a queue of architectures.

    The queue is consumed as the pass runs; a `BuildPass` is not reusable.
    """

    def __init__(self, config: BuildConfig, info: VersionInfo, *, run: Runner = run_step) -> None:
        self.config = config
        self.info = info
        self.archs: deque[str] = deque(config.archs)
        self._run = run

    def run(self) -> list[Path]:
        copied: list[Path] = []
        while self.archs:
            arch = self.archs.popleft()
            self.prepare(arch)
            self.build(arch)
            copied.append(self.copy_artifact())

        if copied:
            _stamp(release_dir_for(self.config, self.info), self.info)
        return copied

    def prepare(self, arch: str) -> None:
        logger.info("Starting to configure '%s'", arch, extra={"color": "blue"})
        out = self.config.out_path
        if out.exists():
            try:
                shutil.rmtree(out)
            except OSError as e:
                raise ArtifactError(f"'{out}' can't be removed: {e.strerror or e}") from e
            logger.info("'%s' is removed!", out)
        else:
            logger.info("'%s' doesn't exist!", out)

        write_gyp_env(
            self.config.gyp_env_path,
            self.config.gyp_env_template,
            target_os=self.config.target_os,
            arch=arch,
        )
        self._run("gclient runhooks", ["gclient", "runhooks"], cwd=self.config.src_path)

    def build(self, arch: str) -> None:
        logger.info("Starting to build '%s'", arch, extra={"color": "blue"})
        argv = ["ninja", "-C", self.config.build.out_dir, self.config.build.target]
        self._run("ninja", argv, cwd=self.config.src_path)
        logger.info("Ended building '%s'", arch, extra={"color": "green"})

    def copy_artifact(self) -> Path:
        # The configuration file is the source of truth for what was just built.
        arch = read_target_arch(self.config.gyp_env_path)
        src = self.config.artifact_path
        if not src.is_file():
            raise ArtifactError(f"Build artifact not found: {src}")

        rel_dir = release_dir_for(self.config, self.info)
        dst = rel_dir / artifact_name(self.config, self.info, arch)

        logger.info("Copying '%s' to '%s'", src, dst)
        try:
            rel_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
        except OSError as e:
            raise ArtifactError(f"Can't copy '{src}' to '{dst}': {e.strerror or e}") from e
        _stamp(dst, self.info)
        return dst


def build_checkout(config: BuildConfig, *, run: Runner = run_step) -> list[Path]:
    """Read the current checkout's metadata, then build every configured architecture."""
    info = read_commit_info(config, run)
    return BuildPass(config, info, run=run).run()
