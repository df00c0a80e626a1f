from __future__ import annotations

from pathlib import Path

import pytest

from vbuilder.config import DEFAULT_GYP_ENV_TEMPLATE
from vbuilder.renderer import RenderError, read_target_arch, render_gyp_env, write_gyp_env


def test_default_template() -> None:
    assert (
        render_gyp_env(DEFAULT_GYP_ENV_TEMPLATE, target_os="android", arch="arm64")
        == "{ 'GYP_DEFINES': 'OS=android target_arch=arm64', }"
    )


def test_unknown_variable_is_an_error() -> None:
    with pytest.raises(RenderError):
        render_gyp_env("{{ nope }}", target_os="android", arch="arm")


def test_write_then_read_back(tmp_path: Path) -> None:
    path = write_gyp_env(tmp_path / "chromium.gyp_env", DEFAULT_GYP_ENV_TEMPLATE, target_os="android", arch="ia32")
    assert read_target_arch(path) == "ia32"

    write_gyp_env(path, DEFAULT_GYP_ENV_TEMPLATE, target_os="android", arch="x64")
    assert read_target_arch(path) == "x64"


def test_write_failure(tmp_path: Path) -> None:
    with pytest.raises(RenderError, match="can't be created") as excinfo:
        write_gyp_env(tmp_path / "missing" / "chromium.gyp_env", DEFAULT_GYP_ENV_TEMPLATE, target_os="android", arch="arm")
    assert excinfo.value.exit_code == 2


def test_read_without_target_arch(tmp_path: Path) -> None:
    path = tmp_path / "chromium.gyp_env"
    path.write_text("{ 'GYP_DEFINES': 'OS=android', }", encoding="utf-8")
    with pytest.raises(RenderError, match="target_arch"):
        read_target_arch(path)
