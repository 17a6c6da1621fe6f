"""Parsers for Gradle's ``projects`` and ``dependencies`` task output.

``parse_projects`` turns the module listing into a list of module names.
``parse_deps`` rebuilds one module's dependency tree from the indentation of
its report and records every parent → child edge in a *Projects* registry.

Usage:
    modules = parse_projects(projects_output)
    parse_deps(projects, dependencies_output, root="my-build")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from archer.model import Project, Projects

# Tree-drawing characters are load-bearing: they must match Gradle's output.
_ROOT_PROJECT_RE = re.compile(r"^Root project '([^']+)'$")
_PROJECT_RE = re.compile(r"^[-+\\| ]+Project '([^']+)'$")
_REPORT_ROOT_RE = re.compile(r"^(?:Root project|Project) '([^']+)'$")
_DEP_RE = re.compile(r"^([-+\\| ]+)(?:project )?([a-zA-Z0-9:._-]+)")

_BRANCH_MARKERS = ("+---", "\\---")


class GradleParseError(ValueError):
    """Raised when a dependency report line cannot be parsed.

    Attributes:
        line: The offending line, verbatim.
        module: Module whose report failed, when known to the caller.
    """

    def __init__(self, line: str, module: str | None = None) -> None:
        super().__init__(f"invalid dependency line: {line}")
        self.line = line
        self.module = module


class _State(Enum):
    WAITING_ROOT = 1
    WAITING_DEPS = 2
    PARSING_DEPS = 3


@dataclass
class _Entry:
    project: Project
    depth: int


def parse_projects(content: str) -> list[str]:
    """Return module names from ``gradle projects`` output, root module first.

    Only the first ``Root project`` line counts. Lines that match neither
    pattern are skipped; the result may be empty.
    """
    result: list[str] = []
    root_added = False

    for line in content.split("\n"):
        if not root_added:
            m = _ROOT_PROJECT_RE.match(line)
            if m:
                result.append(m.group(1))
                root_added = True

        m = _PROJECT_RE.match(line)
        if m:
            result.append(m.group(1))

    return result


def parse_deps(projects: Projects, content: str, root: str) -> None:
    """Record the dependency tree of one ``gradle dependencies`` report.

    Every node resolves to ``projects.get(root, name)``, so a module that
    appears several times in the tree is a single registry node.

    Args:
        projects: Registry to populate (mutated in place).
        content: Full text of the report.
        root: Root identifier for every project created.

    Raises:
        GradleParseError: on a non-empty tree line that is not a dependency.
            Edges recorded before that line are kept.
    """
    state = _State.WAITING_ROOT
    stack: list[_Entry] = []

    for line in content.split("\n"):
        if state == _State.WAITING_ROOT:
            m = _REPORT_ROOT_RE.match(line)
            if m:
                stack.append(_Entry(projects.get(root, m.group(1)), 0))
                state = _State.WAITING_DEPS
            continue

        if state == _State.WAITING_DEPS and line.startswith(_BRANCH_MARKERS):
            state = _State.PARSING_DEPS

        if state == _State.PARSING_DEPS:
            if not line:
                break

            m = _DEP_RE.match(line)
            # "+---" alone matches with the last "-" as the identifier.
            if m is None or not m.group(2).strip("-"):
                raise GradleParseError(line)

            depth = len(m.group(1))
            current = projects.get(root, m.group(2))

            # The root entry sits at depth 0 and every tree line is deeper,
            # so the stack never empties.
            while depth <= stack[-1].depth:
                stack.pop()

            stack[-1].project.add_dependency(current)
            stack.append(_Entry(current, depth))
