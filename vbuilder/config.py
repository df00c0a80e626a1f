"""
config.py

Responsibility: Load the YAML build configuration into a typed, immutable model.

Every key is optional; the defaults reproduce the layout of a Chromium checkout
managed by gclient (a `.gclient` root holding `src/`, `chromium.gyp_env` and `builds/`).
Paths in the file are resolved against `root`, which itself defaults to the
directory the configuration file lives in (or the current directory).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

KNOWN_ARCHS = ("arm", "arm64", "ia32", "x64")

DEFAULT_CONFIG_NAME = "vbuilder.yaml"

DEFAULT_GYP_ENV_TEMPLATE = "{ 'GYP_DEFINES': 'OS={{ target_os }} target_arch={{ arch }}', }"


class ConfigError(ValueError):
    exit_code = 2


@dataclass(frozen=True)
class VersionRange:
    """Inclusive range of MAJOR versions to build."""

    min: int = 29
    max: int = 35

    def __contains__(self, major: object) -> bool:
        return isinstance(major, int) and self.min <= major <= self.max


@dataclass(frozen=True)
class BuildTarget:
    """What ninja builds and where the resulting artifact lands."""

    out_dir: str = "out/Release"
    target: str = "content_shell_apk"
    artifact: str = "apks/ContentShell.apk"


@dataclass(frozen=True)
class BuildConfig:
    root: Path = field(default_factory=Path.cwd)
    src_dir: str = "src"
    release_dir: str = "builds"
    gyp_env_file: str = "chromium.gyp_env"
    gyp_env_template: str = DEFAULT_GYP_ENV_TEMPLATE
    version_file: str = "chrome/VERSION"
    ref: str = "origin/lkgr"
    versions: VersionRange = field(default_factory=VersionRange)
    archs: tuple[str, ...] = ("ia32", "arm")
    target_os: str = "android"
    build: BuildTarget = field(default_factory=BuildTarget)

    @property
    def src_path(self) -> Path:
        return self.root / self.src_dir

    @property
    def release_path(self) -> Path:
        return self.root / self.release_dir

    @property
    def gyp_env_path(self) -> Path:
        return self.root / self.gyp_env_file

    @property
    def version_path(self) -> Path:
        return self.src_path / self.version_file

    @property
    def out_path(self) -> Path:
        """Top-level build output directory, wiped before every architecture."""
        return self.src_path / Path(self.build.out_dir).parts[0]

    @property
    def artifact_path(self) -> Path:
        return self.src_path / self.build.out_dir / self.build.artifact


def _mapping(data: dict[str, Any], key: str) -> dict[str, Any]:
    raw = data.get(key) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"`{key}` must be an object/mapping when provided.")
    return raw


def _int(raw: Any, key: str) -> int:
    # bool is an int subclass; `min: yes` is a typo, not a version.
    if isinstance(raw, bool):
        raise ConfigError(f"`{key}` must be an integer, got {raw!r}.")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"`{key}` must be an integer, got {raw!r}.") from e


def _str(data: dict[str, Any], key: str, default: str, *, strip: bool = True) -> str:
    value = data.get(key)
    if value is None:
        return default
    value = str(value)
    if strip:
        value = value.strip()
    if not value.strip():
        raise ConfigError(f"`{key}` must not be empty.")
    return value


def validate_out_dir(out_dir: str) -> str:
    # Its first component is removed recursively before every build.
    parts = Path(out_dir).parts
    if Path(out_dir).is_absolute() or not parts or ".." in parts:
        raise ConfigError(f"`build.out_dir` must be a relative path inside the source directory, got {out_dir!r}.")
    return out_dir


def validate_archs(archs: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    out = tuple(str(a).strip() for a in archs)
    if not out:
        raise ConfigError("At least one architecture must be configured.")
    unknown = [a for a in out if a not in KNOWN_ARCHS]
    if unknown:
        raise ConfigError(f"Unknown architecture(s) {', '.join(unknown)}; expected one of {', '.join(KNOWN_ARCHS)}.")
    return out


def validate_versions(versions: VersionRange) -> VersionRange:
    if versions.min > versions.max:
        raise ConfigError(f"Version range is empty: min {versions.min} > max {versions.max}.")
    return versions


def config_from_dict(data: dict[str, Any], *, base_dir: Path | None = None) -> BuildConfig:
    """Build a `BuildConfig` from an already-parsed mapping."""
    defaults = BuildConfig()
    base = base_dir if base_dir is not None else Path.cwd()

    root_raw = data.get("root")
    root = (base / str(root_raw)).resolve() if root_raw else base.resolve()

    v_raw = _mapping(data, "versions")
    versions = validate_versions(
        VersionRange(
            min=_int(v_raw.get("min", defaults.versions.min), "versions.min"),
            max=_int(v_raw.get("max", defaults.versions.max), "versions.max"),
        )
    )

    archs_raw = data.get("archs")
    if archs_raw is None:
        archs = defaults.archs
    elif isinstance(archs_raw, (list, tuple)):
        archs = validate_archs(archs_raw)
    else:
        raise ConfigError("`archs` must be a list of architecture names.")

    b_raw = _mapping(data, "build")
    build = BuildTarget(
        out_dir=validate_out_dir(_str(b_raw, "out_dir", defaults.build.out_dir)),
        target=_str(b_raw, "target", defaults.build.target),
        artifact=_str(b_raw, "artifact", defaults.build.artifact),
    )

    return BuildConfig(
        root=root,
        src_dir=_str(data, "src_dir", defaults.src_dir),
        release_dir=_str(data, "release_dir", defaults.release_dir),
        gyp_env_file=_str(data, "gyp_env_file", defaults.gyp_env_file),
        gyp_env_template=_str(data, "gyp_env_template", defaults.gyp_env_template, strip=False),
        version_file=_str(data, "version_file", defaults.version_file),
        ref=_str(data, "ref", defaults.ref),
        versions=versions,
        archs=archs,
        target_os=_str(data, "target_os", defaults.target_os),
        build=build,
    )


def load_config(config_path: str | Path | None = None) -> BuildConfig:
    """
    Load a configuration file.

    With no path, `vbuilder.yaml` in the current directory is used if it exists;
    otherwise the defaults apply with `root` set to the current directory.
    """
    if config_path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.exists():
            return config_from_dict({})
        config_path = candidate

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")

    return config_from_dict(data, base_dir=path.resolve().parent)


def with_overrides(
    config: BuildConfig,
    *,
    min_major: int | None = None,
    max_major: int | None = None,
    archs: list[str] | None = None,
    release_dir: str | None = None,
    root: str | Path | None = None,
) -> BuildConfig:
    """Apply CLI overrides on top of a loaded configuration."""
    versions = VersionRange(
        min=config.versions.min if min_major is None else min_major,
        max=config.versions.max if max_major is None else max_major,
    )
    return replace(
        config,
        versions=validate_versions(versions),
        archs=validate_archs(archs) if archs else config.archs,
        release_dir=release_dir or config.release_dir,
        root=Path(root).resolve() if root else config.root,
    )
