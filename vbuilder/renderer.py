"""
renderer.py

Responsibility: Render and write the build-configuration file (`chromium.gyp_env`).

gclient's runhooks step reads GYP_DEFINES from this file, so its content is what
selects the target OS and architecture for the next ninja build.

This module intentionally does NOT know about git, gclient, or ninja.
"""

from __future__ import annotations

import re
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

_TARGET_ARCH_RE = re.compile(r"target_arch=(\w+)")


class RenderError(RuntimeError):
    exit_code = 2


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_gyp_env(template: str, *, target_os: str, arch: str) -> str:
    try:
        return _environment().from_string(template).render(target_os=target_os, arch=arch)
    except TemplateError as e:
        raise RenderError("Failed rendering the build configuration template") from e


def write_gyp_env(path: str | Path, template: str, *, target_os: str, arch: str) -> Path:
    """
    Render the configuration for `arch` and write it to `path`, replacing any previous content.
    """
    dst = Path(path)
    text = render_gyp_env(template, target_os=target_os, arch=arch)
    try:
        dst.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise RenderError(f"'{dst}' can't be created: {e.strerror or e}") from e
    return dst


def read_target_arch(path: str | Path) -> str:
    """
    Return the target_arch currently selected by the configuration file at `path`.
    """
    src = Path(path)
    try:
        text = src.read_text(encoding="utf-8")
    except OSError as e:
        raise RenderError(f"'{src}' can't be read: {e.strerror or e}") from e
    m = _TARGET_ARCH_RE.search(text)
    if not m:
        raise RenderError(f"'{src}' does not define a target_arch")
    return m.group(1)
