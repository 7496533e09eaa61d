from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from codemerge import __version__
from codemerge.config import COPY_BUFFER_SIZE, FILE_FOOTER_TEMPLATE, FILE_HEADER_TEMPLATE, PREAMBLE_TEMPLATE
from codemerge.exceptions import CopyError, OutputCreationError
from codemerge.logging import logger

if TYPE_CHECKING:
    from codemerge.file_manipulation import FileCollector
    from codemerge.progress import ProgressReporter


def _reason(error: OSError) -> str:
    return error.strerror or str(error)


class MergeWriter:
    """Stream collected files into one destination, category by category.

    The preamble banner is emitted once, right before the first file that
    actually produces output. Any read or write failure aborts the merge with
    a CopyError; what was already written stays in the destination.
    """

    def __init__(
        self,
        dest: BinaryIO,
        *,
        buffer_size: int = COPY_BUFFER_SIZE,
        progress: ProgressReporter | None = None,
    ) -> None:
        self.dest = dest
        self.buffer_size = buffer_size
        self.progress = progress
        self.preamble_written = False
        self.files_written = 0

    def _emit(self, data: bytes, path: str) -> None:
        try:
            written = self.dest.write(data)
        except OSError as e:
            raise CopyError(path=path, reason=_reason(e)) from e
        if written is not None and written != len(data):
            raise CopyError(path=path, reason=f"short write ({written} of {len(data)} bytes)")

    def _write_preamble(self, path: str) -> None:
        if self.preamble_written:
            return
        self._emit(PREAMBLE_TEMPLATE.format(version=__version__).encode("utf-8"), path)
        self.preamble_written = True

    def write_file(self, path: str) -> bool:
        """Append one file between its header and footer lines.

        Args:
            path (str): canonical absolute path of the file to copy

        Raises:
            CopyError: if the file cannot be opened or read, or the destination write fails

        Returns:
            bool: True if the file was written, False if it was missing or empty
        """
        try:
            size = os.stat(path).st_size
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CopyError(path=path, reason=_reason(e)) from e
        if size == 0:
            return False

        try:
            src = open(path, "rb")  # noqa: SIM115
        except OSError as e:
            raise CopyError(path=path, reason=_reason(e)) from e

        with src:
            self._write_preamble(path)
            self._emit(os.fsencode(FILE_HEADER_TEMPLATE.format(path=path)), path)
            while True:
                try:
                    chunk = src.read(self.buffer_size)
                except OSError as e:
                    raise CopyError(path=path, reason=_reason(e)) from e
                if not chunk:
                    break
                self._emit(chunk, path)
            self._emit(os.fsencode(FILE_FOOTER_TEMPLATE.format(path=path)), path)

        self.files_written += 1
        return True

    def write(self, collector: FileCollector) -> int:
        """Merge every collected file in category order, then path byte order.

        Args:
            collector (FileCollector): the filled collector; it is sorted in place

        Raises:
            CopyError: on the first unrecoverable read or write failure

        Returns:
            int: the number of files actually written
        """
        collector.sort()
        total = collector.total
        processed = 0
        try:
            for _category, paths in collector.categories():
                for path in paths:
                    self.write_file(path)
                    processed += 1
                    if self.progress is not None:
                        self.progress.report(processed, total)
            try:
                self.dest.flush()
            except OSError as e:
                raise CopyError(path=str(getattr(self.dest, "name", "<output>")), reason=_reason(e)) from e
        finally:
            if self.progress is not None:
                self.progress.close()
        return self.files_written


def merge_to_file(
    collector: FileCollector,
    output: str | Path,
    *,
    buffer_size: int = COPY_BUFFER_SIZE,
    progress: ProgressReporter | None = None,
) -> int:
    """Create (or truncate) `output` and merge the collected files into it.

    Args:
        collector (FileCollector): the filled collector
        output (str | Path): destination file
        buffer_size (int, optional): copy buffer size in bytes. Defaults to COPY_BUFFER_SIZE.
        progress (ProgressReporter | None, optional): progress sink. Defaults to None.

    Raises:
        OutputCreationError: if the destination cannot be created
        CopyError: if a copy fails mid-merge; the partial output is left on disk

    Returns:
        int: the number of files written
    """
    try:
        dest = open(output, "wb")  # noqa: SIM115
    except OSError as e:
        raise OutputCreationError(path=Path(output), reason=_reason(e)) from e

    with dest:
        written = MergeWriter(dest, buffer_size=buffer_size, progress=progress).write(collector)
    logger.info("merge_finished", output=str(output), files=written, collected=collector.total)
    return written
