"""Dependency graph domain model: projects, dependency edges, sizes, registry.

A *Projects* registry deduplicates *Project* nodes by ``(root, name)``.
Importers look nodes up through the registry, attach sizes and dependency
edges, and set free-form string configuration on nodes and edges.

Usage:
    projects = Projects()
    app = projects.get("build", ":app")
    app.type = ProjectType.CODE
    app.add_dependency(projects.get("build", ":core"))
    for p in projects.list_projects(FilterType.EXCLUDE_EXTERNAL):
        print(p.simple_name())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Iterator

_TRUE_VALUES: frozenset[str] = frozenset(["true", "yes", "y", "on", "1"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InvalidArgumentError(ValueError):
    """Raised when a registry lookup receives an empty root or name."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProjectType(Enum):
    EXTERNAL_DEPENDENCY = "external"
    CODE = "code"
    DATABASE = "database"


class FilterType(Enum):
    ALL = "all"
    EXCLUDE_EXTERNAL = "exclude-external"


# ---------------------------------------------------------------------------
# Size
# ---------------------------------------------------------------------------


@dataclass
class Size:
    """Additive volume metrics for one size category of a project."""

    lines: int = 0
    files: int = 0
    bytes: int = 0
    other: dict[str, int] = field(default_factory=dict)

    def add(self, other: Size) -> None:
        """Add *other* into this Size, field by field.

        Named counters in ``other.other`` are summed into matching keys;
        keys missing on this side start at zero.
        """
        self.lines += other.lines
        self.files += other.files
        self.bytes += other.bytes

        for k, v in other.other.items():
            self.other[k] = self.other.get(k, 0) + v


# ---------------------------------------------------------------------------
# Config store
# ---------------------------------------------------------------------------


class _Configurable:
    """String key/value store shared by projects and dependency edges.

    The empty string is never stored: setting a key to ``""`` removes it,
    so an absent key and an empty value read back the same.
    """

    _config: dict[str, str]

    def set_config(self, key: str, value: str) -> bool:
        """Store *value* under *key*. Returns True if the stored value changed."""
        if self.get_config(key) == value:
            return False

        if value == "":
            del self._config[key]
        else:
            self._config[key] = value

        return True

    def get_config(self, key: str) -> str:
        return self._config.get(key, "")

    @property
    def config(self) -> dict[str, str]:
        """A copy of the stored configuration."""
        return dict(self._config)


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


class Dependency(_Configurable):
    """Directed edge *source* → *target*, owned by its source project."""

    def __init__(self, source: Project, target: Project) -> None:
        self.source = source
        self.target = target
        self._config = {}

    def __repr__(self) -> str:
        return f"Dependency({self.source!r}, {self.target!r})"

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Project(_Configurable):
    """A node of the dependency graph: a module, external library, or table.

    Attributes:
        root: Source-system identifier (build root, database schema).
        name: Module / table identifier within *root*. Never empty.
        name_parts: Optional hierarchical decomposition of *name*, used by
            ``simple_name()``.
        type: Discriminator controlling sort precedence and filtering.
        root_dir: Build root directory (opaque to the model).
        dir: Project directory (opaque to the model).
        project_file: Build file path (opaque to the model).
        data_dir: Opaque per-project data handle. Stored and loaded by the
            storage layer, never interpreted by it.
    """

    root: str
    name: str
    name_parts: list[str] = field(default_factory=list)
    type: ProjectType = ProjectType.EXTERNAL_DEPENDENCY

    root_dir: str = ""
    dir: str = ""
    project_file: str = ""

    data_dir: str | None = None

    _dependencies: dict[str, Dependency] = field(
        default_factory=dict, init=False, repr=False
    )
    _sizes: dict[str, Size] = field(default_factory=dict, init=False, repr=False)
    _config: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def __str__(self) -> str:
        return f"{self.name}[{self.type.value}]"

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def add_dependency(self, target: Project) -> Dependency:
        """Record an edge to *target*, replacing any earlier edge to the same name.

        The replaced edge's configuration is discarded.
        """
        result = Dependency(self, target)
        self._dependencies[target.name] = result
        return result

    def list_dependencies(self, filter: FilterType = FilterType.ALL) -> list[Dependency]:
        """Return outgoing edges in presentation order."""
        result = [
            d
            for d in self._dependencies.values()
            if not (
                filter == FilterType.EXCLUDE_EXTERNAL
                and d.target.is_external_dependency()
            )
        ]
        sort_dependencies(result)
        return result

    # ------------------------------------------------------------------
    # Sizes
    # ------------------------------------------------------------------

    def add_size(self, category: str, size: Size) -> None:
        """Set the size bucket for *category*, overwriting any earlier value."""
        self._sizes[category] = size

    def get_size(self) -> Size:
        """Return the sum of all size buckets."""
        result = Size()
        for size in self._sizes.values():
            result.add(size)
        return result

    def get_size_of(self, category: str) -> Size:
        """Return the bucket for *category*, or a zero Size if there is none."""
        result = self._sizes.get(category)
        return result if result is not None else Size()

    def list_sizes(self) -> dict[str, Size]:
        return dict(self._sizes)

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def full_name(self) -> str:
        return f"{self.root}:{self.name}"

    def simple_name(self) -> str:
        return self.level_simple_name(0)

    def level_simple_name(self, level: int) -> str:
        """Shorten the name from ``name_parts``, keeping at most *level* parts.

        A *level* of 0 or less keeps every part. Leading parts that prefix the
        following part are dropped (``org:org-sub:org-sub-x`` → ``org-sub-x``).
        The full name is returned whenever the short form would not be shorter.
        """
        if not self.name_parts:
            return self.name

        parts = self.name_parts
        if level > 0:
            parts = parts[:level]

        result = ":".join(_simplify_prefixes(parts))

        if len(self.name) <= len(result):
            return self.name
        return result

    # ------------------------------------------------------------------
    # Type / flags
    # ------------------------------------------------------------------

    def is_ignored(self) -> bool:
        return self.get_config("ignore").strip().lower() in _TRUE_VALUES

    def is_code(self) -> bool:
        return self.type == ProjectType.CODE

    def is_external_dependency(self) -> bool:
        return self.type == ProjectType.EXTERNAL_DEPENDENCY

    def is_database(self) -> bool:
        return self.type == ProjectType.DATABASE


def _simplify_prefixes(parts: list[str]) -> list[str]:
    while len(parts) > 1 and parts[1].startswith(parts[0]):
        parts = parts[1:]
    return parts


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Projects:
    """Deduplicating index of Project nodes keyed by ``(root, name)``.

    One registry covers one analysis run. It is passed explicitly to every
    importer; it performs no locking, so concurrent writers must take turns.
    """

    def __init__(self) -> None:
        self._all: dict[tuple[str, str], Project] = {}

    def get(self, root: str, name: str) -> Project:
        """Return the project for ``(root, name)``, creating it on first use.

        Raises:
            InvalidArgumentError: if *root* or *name* is empty.
        """
        key = _key(root, name)

        result = self._all.get(key)
        if result is None:
            result = Project(root=root, name=name)
            self._all[key] = result

        return result

    def get_or_none(self, root: str, name: str) -> Project | None:
        """Return the project for ``(root, name)`` without creating it."""
        return self._all.get(_key(root, name))

    def list_projects(self, filter: FilterType = FilterType.ALL) -> list[Project]:
        """Return registered projects in presentation order."""
        result = [
            p
            for p in self._all.values()
            if not (filter == FilterType.EXCLUDE_EXTERNAL and p.is_external_dependency())
        ]
        sort_projects(result)
        return result

    def __len__(self) -> int:
        return len(self._all)

    def __contains__(self, key: object) -> bool:
        return key in self._all

    def __iter__(self) -> Iterator[Project]:
        return iter(self.list_projects())


def _key(root: str, name: str) -> tuple[str, str]:
    if not root:
        raise InvalidArgumentError("empty root not supported")
    if not name:
        raise InvalidArgumentError("empty name not supported")
    return root, name


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def _compare_projects(a: Project, b: Project) -> int:
    # Only the code/external pair has a type precedence; every other pair
    # compares by name.
    if a.is_code() and b.is_external_dependency():
        return -1
    if a.is_external_dependency() and b.is_code():
        return 1

    an = a.name.lstrip(":")
    bn = b.name.lstrip(":")
    return (an > bn) - (an < bn)


def sort_projects(projects: list[Project]) -> None:
    """Sort *projects* in place: code before external, then by name sans ``:``."""
    projects.sort(key=cmp_to_key(_compare_projects))


def _compare_dependencies(a: Dependency, b: Dependency) -> int:
    pa, pb = a.source, b.source
    if pa.name == pb.name:
        pa, pb = a.target, b.target
    return _compare_projects(pa, pb)


def sort_dependencies(deps: list[Dependency]) -> None:
    """Sort *deps* in place, by source then (for equal source names) by target."""
    deps.sort(key=cmp_to_key(_compare_dependencies))
