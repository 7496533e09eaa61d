from __future__ import annotations

from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field


class Category(StrEnum):
    """Output grouping of a merged file.

    Declaration order is the output order: build-system dialects first,
    then headers, then sources.
    """

    MAKE = auto()
    MESON = auto()
    CMAKE = auto()
    AUTOTOOLS = auto()
    NINJA = auto()
    BAZEL = auto()
    QMAKE = auto()
    SCONS = auto()
    HEADER = auto()
    SOURCE = auto()


class ClassificationRule(BaseModel):
    """One entry of the classification table.

    Attributes:
        matcher: An exact filename, or a suffix pattern when it starts with ``.``.
        category: The category assigned to matching filenames.
    """

    model_config = ConfigDict(frozen=True)

    matcher: str = Field(..., min_length=1, description="Exact filename or '.suffix' pattern")
    category: Category

    @property
    def is_suffix(self) -> bool:
        return self.matcher.startswith(".")

    def matches(self, filename: str) -> bool:
        """Check whether `filename` is matched by this rule.

        Args:
            filename (str): the bare filename (no directory part)

        Returns:
            bool: True for byte-equality on exact rules, or a trailing match on suffix rules
        """
        if self.is_suffix:
            return filename.endswith(self.matcher)
        return filename == self.matcher


def _rules(category: Category, *matchers: str) -> tuple[ClassificationRule, ...]:
    return tuple(ClassificationRule(matcher=m, category=category) for m in matchers)


# First match wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    *_rules(Category.MAKE, "Makefile", "makefile", "GNUmakefile", ".mk", ".mak"),
    *_rules(Category.MESON, "meson.build", "meson_options.txt", "meson.options"),
    *_rules(Category.CMAKE, "CMakeLists.txt", "CMakeCache.txt", "CMakePresets.json", ".cmake"),
    *_rules(Category.AUTOTOOLS, "configure.ac", "configure.in", "Makefile.am", "Makefile.in", ".m4"),
    *_rules(Category.NINJA, "build.ninja", ".ninja"),
    *_rules(
        Category.BAZEL,
        "BUILD",
        "BUILD.bazel",
        "WORKSPACE",
        "WORKSPACE.bazel",
        "MODULE.bazel",
        ".bazelrc",
        ".bzl",
    ),
    *_rules(Category.QMAKE, ".qmake.conf", ".pro", ".pri"),
    *_rules(Category.SCONS, "SConstruct", "SConscript", "Sconstruct"),
)

HEADER_EXTENSIONS = frozenset({".h", ".hpp", ".hxx", ".hh"})
SOURCE_EXTENSIONS = frozenset({".c", ".cpp", ".cxx", ".cc"})

# Hidden files are only merged for these categories; dot-prefixed headers and
# sources are always dropped.
DOTFILE_CATEGORIES = frozenset(
    {
        Category.MAKE,
        Category.MESON,
        Category.CMAKE,
        Category.AUTOTOOLS,
        Category.NINJA,
        Category.BAZEL,
        Category.QMAKE,
        Category.SCONS,
    },
)

EXCLUDED_DIRS = frozenset(
    {
        ".cache",
        ".env",
        ".git",
        ".idea",
        ".venv",
        "build",
        "builddir",
        "cmake-build-debug",
        "dist",
        "env",
        "node_modules",
        "target",
        "venv",
    },
)

MAX_PATH_LENGTH = 4096
COPY_BUFFER_SIZE = 8192
PROGRESS_BAR_WIDTH = 48
DEFAULT_OUTPUT = "merged.txt"

PREAMBLE_TEMPLATE = "# Created by codemerge v{version}\n# https://github.com/Lennart1978/ccodemerge\n\n"
FILE_HEADER_TEMPLATE = "\nFile: {path}\n\n"
FILE_FOOTER_TEMPLATE = "\n-------------------------- End of {path} --------------------------\n"


class FileRecord(BaseModel):
    """A classified file found by the walker.

    Attributes:
        path: Canonical absolute path of the regular file on disk.
        category: The category the file is merged under.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Canonical absolute file path")
    category: Category
