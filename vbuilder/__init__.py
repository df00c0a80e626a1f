"""
vbuilder package

Builds a range of versions of a gclient-managed checkout (Chromium-style) for
several CPU architectures and archives the artifacts by version.

Key responsibilities are split across modules:
- `scanner.py`: find the commits that introduced each MAJOR version
- `checkout.py`: reset/clean/checkout/sync loop over those commits
- `build_pass.py`: per-architecture configure -> ninja -> archive
- `commit_info.py`: version numbers and commit position of the current checkout
- `renderer.py`: render the build configuration file (`chromium.gyp_env`)
- `process.py`: the only place external commands are spawned
- `config.py`: YAML configuration
- `cli.py`: CLI entrypoint and the single error-to-exit-status handler
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
