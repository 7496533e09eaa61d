from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CodeMergeError(Exception):
    """Base exception for errors in the codemerge module."""

    def __str__(self) -> str:
        return getattr(self, "message", self.__class__.__name__)


@dataclass(frozen=True)
class AccessError(CodeMergeError):
    """Raised when a single directory entry cannot be opened, stat'ed or resolved."""

    path: str
    reason: str

    @property
    def message(self) -> str:
        return f"Error accessing {self.path}: {self.reason}"


@dataclass(frozen=True)
class PathTooLongError(CodeMergeError):
    """Raised when a constructed path exceeds the maximum path length."""

    path: str
    limit: int

    @property
    def message(self) -> str:
        return f"Path too long ({self.limit} bytes max): {self.path}"


@dataclass(frozen=True)
class TraversalError(CodeMergeError):
    """Raised when the walk root itself cannot be traversed."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Cannot traverse {self.path}: {self.reason}"


@dataclass(frozen=True)
class AllocationError(CodeMergeError):
    """Raised when a category collection cannot grow."""

    category: str

    @property
    def message(self) -> str:
        return f"Out of memory while collecting {self.category} files"


@dataclass(frozen=True)
class OutputCreationError(CodeMergeError):
    """Raised when the merge destination cannot be created."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Error creating output {self.path}: {self.reason}"


@dataclass(frozen=True)
class CopyError(CodeMergeError):
    """Raised when reading a source file or writing the destination fails mid-merge."""

    path: str
    reason: str

    @property
    def message(self) -> str:
        return f"Copy error for {self.path}: {self.reason}"


@dataclass(frozen=True)
class ConfigError(CodeMergeError):
    """Raised when a YAML configuration file cannot be loaded."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid configuration file {self.path}: {self.reason}"
