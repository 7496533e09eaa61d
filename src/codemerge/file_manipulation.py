from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from codemerge.classifier import classify_entry
from codemerge.config import EXCLUDED_DIRS, MAX_PATH_LENGTH, Category, FileRecord
from codemerge.exceptions import AccessError, AllocationError, PathTooLongError, TraversalError
from codemerge.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from codemerge.exceptions import CodeMergeError


def report_skip(error: CodeMergeError) -> None:
    """Log a recoverable per-entry failure on the error channel."""
    logger.error("entry_skipped", kind=type(error).__name__, error=str(error))


def list_directory(path: str) -> list[str]:
    """List the entry names of a directory in sorted order.

    Args:
        path (str): the directory to list

    Raises:
        OSError: if the directory cannot be opened or read

    Returns:
        list[str]: the entry names, `.` and `..` excluded
    """
    with os.scandir(path) as it:
        return sorted(entry.name for entry in it)


def is_excluded(root: str, path: str, excluded_dirs: Iterable[str] = EXCLUDED_DIRS) -> bool:
    """Check every component of `path` (relative to `root`) against the exclusion set.

    This is a pure path computation: nothing is read from the file system.

    Args:
        root (str): the walk root
        path (str): a path under `root`
        excluded_dirs (Iterable[str], optional): directory basenames to prune. Defaults to EXCLUDED_DIRS.

    Returns:
        bool: True if any component is excluded
    """
    excluded = frozenset(excluded_dirs)
    try:
        parts = Path(path).relative_to(root).parts
    except ValueError:
        parts = Path(path).parts
    return any(part in excluded for part in parts)


def resolve_symlink(link_path: str) -> str:
    """Read a symbolic link and return its target path.

    Relative targets are joined onto the directory containing the link.

    Args:
        link_path (str): path of the symbolic link

    Raises:
        OSError: if the link cannot be read

    Returns:
        str: the (not yet canonical) target path
    """
    target = os.readlink(link_path)
    if not os.path.isabs(target):
        target = os.path.join(os.path.dirname(link_path), target)
    return target


def make_record(name: str, file_path: str) -> FileRecord | None:
    """Classify `name` and register the canonical path of `file_path`.

    Args:
        name (str): the filename used for classification (the link name for symlinks)
        file_path (str): the regular file whose canonical path is recorded

    Returns:
        FileRecord | None: the record, or None if unclassified, hidden or unresolvable
    """
    category = classify_entry(name)
    if category is None:
        return None
    try:
        canonical = os.path.realpath(file_path, strict=True)
    except OSError as e:
        report_skip(AccessError(path=file_path, reason=e.strerror or str(e)))
        return None
    return FileRecord(path=canonical, category=category)


def _symlink_record(link_path: str, name: str) -> FileRecord | None:
    try:
        target = resolve_symlink(link_path)
    except OSError as e:
        report_skip(AccessError(path=link_path, reason=e.strerror or str(e)))
        return None
    try:
        st = os.stat(target)
    except OSError as e:
        report_skip(AccessError(path=link_path, reason=e.strerror or str(e)))
        return None
    if stat.S_ISDIR(st.st_mode):
        logger.info("symlink_to_directory_not_followed", path=link_path, target=target)
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    return make_record(name, target)


def _walk_directory(
    root: str,
    dir_path: str,
    names: list[str],
    excluded_dirs: frozenset[str],
    max_path_length: int,
) -> Iterator[FileRecord]:
    for name in names:
        sub_path = os.path.join(dir_path, name)
        if is_excluded(root, sub_path, excluded_dirs):
            continue
        if len(os.fsencode(sub_path)) >= max_path_length:
            report_skip(PathTooLongError(path=sub_path, limit=max_path_length))
            continue

        try:
            st = os.lstat(sub_path)
        except OSError as e:
            report_skip(AccessError(path=sub_path, reason=e.strerror or str(e)))
            continue

        if stat.S_ISLNK(st.st_mode):
            record = _symlink_record(sub_path, name)
            if record is not None:
                yield record
        elif stat.S_ISREG(st.st_mode):
            record = make_record(name, sub_path)
            if record is not None:
                yield record
        elif stat.S_ISDIR(st.st_mode):
            try:
                children = list_directory(sub_path)
            except OSError as e:
                report_skip(AccessError(path=sub_path, reason=e.strerror or str(e)))
                continue
            yield from _walk_directory(root, sub_path, children, excluded_dirs, max_path_length)


def walk(
    root: str | Path,
    *,
    excluded_dirs: Iterable[str] = EXCLUDED_DIRS,
    max_path_length: int = MAX_PATH_LENGTH,
) -> Iterator[FileRecord]:
    """Walk the tree under `root` depth-first and yield every classified file.

    Excluded directory names are pruned at any depth before the entry is
    touched. Symbolic links are resolved by hand: links to regular files are
    classified by the link's own name and recorded under the target's
    canonical path, links to directories are never descended. Failures on a
    single entry are logged and the entry is skipped.

    Args:
        root (str | Path): the directory to walk
        excluded_dirs (Iterable[str], optional): directory basenames to prune. Defaults to EXCLUDED_DIRS.
        max_path_length (int, optional): longest accepted path in bytes. Defaults to MAX_PATH_LENGTH.

    Raises:
        TraversalError: if `root` itself cannot be opened as a directory

    Yields:
        Iterator[FileRecord]: the classified files, in pre-order
    """
    root_path = os.path.abspath(os.fspath(root))
    try:
        names = list_directory(root_path)
    except OSError as e:
        raise TraversalError(path=Path(root_path), reason=e.strerror or str(e)) from e
    yield from _walk_directory(root_path, root_path, names, frozenset(excluded_dirs), max_path_length)


class FileCollector:
    """Per-category ordered collections of canonical file paths.

    The same canonical path reached through two different links is kept twice
    unless `dedupe` is set, in which case the first registration wins.
    """

    def __init__(self, *, dedupe: bool = False) -> None:
        self.dedupe = dedupe
        self._paths: dict[Category, list[str]] = {category: [] for category in Category}
        self._seen: set[str] = set()

    def add(self, category: Category, path: str) -> bool:
        """Append `path` to the collection of `category`.

        Args:
            category (Category): the target category
            path (str): canonical absolute path

        Raises:
            AllocationError: if the collection cannot grow

        Returns:
            bool: False if the path was dropped as a duplicate, True otherwise
        """
        if self.dedupe and path in self._seen:
            logger.info("duplicate_path_dropped", path=path, category=str(category))
            return False
        try:
            self._paths[category].append(path)
            if self.dedupe:
                self._seen.add(path)
        except MemoryError as e:
            raise AllocationError(category=str(category)) from e
        return True

    def add_record(self, record: FileRecord) -> bool:
        return self.add(record.category, record.path)

    def paths(self, category: Category) -> list[str]:
        return list(self._paths[category])

    def sort(self) -> None:
        """Sort every category by plain byte order of its paths."""
        for paths in self._paths.values():
            paths.sort(key=os.fsencode)

    def categories(self) -> Iterator[tuple[Category, list[str]]]:
        """Yield `(category, paths)` in output order."""
        for category in Category:
            yield category, list(self._paths[category])

    @property
    def total(self) -> int:
        return sum(len(paths) for paths in self._paths.values())

    def __len__(self) -> int:
        return self.total


def collect_files(
    root: str | Path,
    *,
    excluded_dirs: Iterable[str] = EXCLUDED_DIRS,
    dedupe: bool = False,
) -> FileCollector:
    """Walk `root` and gather every classified file into a FileCollector.

    Args:
        root (str | Path): the directory to walk
        excluded_dirs (Iterable[str], optional): directory basenames to prune. Defaults to EXCLUDED_DIRS.
        dedupe (bool, optional): drop repeated canonical paths. Defaults to False.

    Returns:
        FileCollector: the filled, unsorted collector
    """
    collector = FileCollector(dedupe=dedupe)
    for record in walk(root, excluded_dirs=excluded_dirs):
        collector.add_record(record)
    logger.info("walk_finished", root=str(root), files=collector.total)
    return collector
