"""
cli.py

Responsibility: CLI entrypoint for vbuilder.

Commands:
- `scan`:  list the commits whose MAJOR version falls in the configured range
- `build`: build the current checkout for every configured architecture
- `run`:   scan, then check out and build each commit in turn

This module is the only place that turns errors into an exit status; everything
below it raises.
"""

from __future__ import annotations

import argparse
import json
import logging

from vbuilder import __version__
from vbuilder.build_pass import ArtifactError, build_checkout
from vbuilder.checkout import CheckoutLoop
from vbuilder.commit_info import CommitInfoError
from vbuilder.config import BuildConfig, ConfigError, load_config, with_overrides
from vbuilder.console import configure_logging
from vbuilder.process import StepError
from vbuilder.renderer import RenderError
from vbuilder.scanner import CommitDescriptor, scan_commits

logger = logging.getLogger(__name__)

# Every error below carries the exit status it maps to.
PIPELINE_ERRORS = (StepError, ArtifactError, RenderError, CommitInfoError, ConfigError)


def _config_from_args(args: argparse.Namespace) -> BuildConfig:
    config = load_config(args.config)
    return with_overrides(
        config,
        min_major=args.min_major,
        max_major=args.max_major,
        archs=args.archs,
        release_dir=args.release_dir,
        root=args.root,
    )


def _format_commits(commits: list[CommitDescriptor]) -> str:
    return "[" + ",\n".join(json.dumps({"commit": c.commit, "major": c.major}) for c in commits) + "]"


def scan_cmd(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    commits = scan_commits(config)
    logger.info("%s", _format_commits(commits), extra={"color": "yellow"})
    return 0


def build_cmd(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    build_checkout(config)
    return 0


def run_cmd(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    commits = scan_commits(config)
    logger.info("%s", _format_commits(commits), extra={"color": "yellow"})
    CheckoutLoop(config, commits).run()
    return 0


def _add_global_arguments(p: argparse.ArgumentParser, *, top_level: bool) -> None:
    # Accepted before or after the command; a subcommand only sets what it was given
    # so it never clobbers a value parsed by the top-level parser.
    none = None if top_level else argparse.SUPPRESS
    p.add_argument("--config", default=none, help="Path to the YAML config (default: ./vbuilder.yaml if present)")
    p.add_argument("--root", default=none, help="Directory holding .gclient and src/ (overrides config root)")
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False if top_level else argparse.SUPPRESS,
        help="Log every command line",
    )


def _add_common_arguments(p: argparse.ArgumentParser, *, versions: bool) -> None:
    _add_global_arguments(p, top_level=False)
    if versions:
        p.add_argument("--min", dest="min_major", type=int, default=None, help="Lowest MAJOR version to build")
        p.add_argument("--max", dest="max_major", type=int, default=None, help="Highest MAJOR version to build")
    else:
        p.set_defaults(min_major=None, max_major=None)


def _add_build_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--arch",
        dest="archs",
        action="append",
        default=None,
        help="Architecture to build; repeat for several (overrides config archs)",
    )
    p.add_argument("--release-dir", default=None, help="Where built artifacts are archived")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vbuilder", description="Build several versions/architectures of a gclient checkout")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_global_arguments(p, top_level=True)
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scan", help="List the commits that introduced each MAJOR version in range")
    _add_common_arguments(s, versions=True)
    s.set_defaults(func=scan_cmd, archs=None, release_dir=None)

    b = sub.add_parser("build", help="Build the current checkout for every architecture")
    _add_common_arguments(b, versions=False)
    _add_build_arguments(b)
    b.set_defaults(func=build_cmd)

    r = sub.add_parser("run", help="Check out and build every commit in the version range")
    _add_common_arguments(r, versions=True)
    _add_build_arguments(r)
    r.set_defaults(func=run_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except PIPELINE_ERRORS as e:
        logger.error("%s", e)
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
