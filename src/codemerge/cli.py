"""
codemerge — Flatten a C/C++ project into a single text file.

Overview
--------
The current directory tree is scanned for build descriptions (Make, Meson,
CMake, Autotools, Ninja, Bazel, QMake, SCons), headers and sources. Their
contents are concatenated into `merged.txt`, grouped by category and sorted
by path inside each category, each file framed by a header and an
"End of" footer line.

Directories such as `build`, `.git` or `node_modules` are pruned at any depth.
Symbolic links to regular files are followed, links to directories are not.

Usage
-----
Run `python -m codemerge.cli --help` for full options. Common examples:
    - Merge the current directory into merged.txt:
        codemerge

    - Merge another tree, skipping `third_party` directories, quietly:
        codemerge --root ../project --exclude-dir third_party --no-progress

    - Read defaults from a YAML file and log to a file:
        codemerge --config codemerge.yaml --log-file merge.log
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from codemerge import __version__
from codemerge.config import DEFAULT_OUTPUT
from codemerge.exceptions import CodeMergeError, ConfigError
from codemerge.file_manipulation import collect_files
from codemerge.logging import close_log_file, logger, setup_logging
from codemerge.output_construction import merge_to_file
from codemerge.progress import ProgressReporter
from codemerge.settings import Settings, build_settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="codemerge",
        description="Merge build files, headers and sources of a project tree into one file.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--root", type=Path, default=None, help="Directory to scan (default: cwd).")
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Output file (default: {DEFAULT_OUTPUT}).",
    )
    p.add_argument(
        "--exclude-dir",
        action="append",
        default=None,
        help="Extra directory name to prune at any depth (repeatable).",
    )
    p.add_argument(
        "--dedupe",
        action="store_true",
        default=None,
        help="Merge a file only once when several links point to it.",
    )
    p.add_argument(
        "--no-progress",
        action="store_true",
        default=None,
        help="Do not draw the progress bar.",
    )
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("--config", type=Path, default=None, help="YAML file with default settings.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into Settings.

    Values from `--config` are used as defaults; explicit flags override them.
    """
    args = vars(build_parser().parse_args(argv))
    config = args.pop("config")
    return build_settings(args, config)


def run(settings: Settings) -> int:
    """Walk, collect and merge according to `settings`.

    Returns:
        int: the number of files written
    """
    collector = collect_files(
        settings.root,
        excluded_dirs=settings.excluded_dirs,
        dedupe=settings.dedupe,
    )
    progress = ProgressReporter(enabled=not settings.no_progress)
    return merge_to_file(
        collector,
        settings.output,
        buffer_size=settings.buffer_size,
        progress=progress,
    )


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except ConfigError as e:
        logger.error("invalid_configuration", error=str(e))
        return 1
    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        written = run(settings)
    except CodeMergeError as e:
        logger.error("merge_failed", kind=type(e).__name__, error=str(e))
        return 1
    finally:
        close_log_file()

    print(f"Successfully merged {written} files into {settings.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
