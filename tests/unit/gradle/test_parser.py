"""Tests for gradle/parser.py."""

from __future__ import annotations

import pytest

from archer.gradle.parser import GradleParseError, parse_deps, parse_projects
from archer.model import Projects

_PROJECTS_OUTPUT = """\
> Task :projects

------------------------------------------------------------
Root project 'shop'
------------------------------------------------------------

Root project 'shop'
+--- Project ':app'
|    \\--- Project ':app:checkout'
+--- Project ':core'
\\--- Project ':db'

To see a list of the tasks of a project, run gradlew <project-path>:tasks
"""

_DEPS_OUTPUT = """\
> Task :app:dependencies

------------------------------------------------------------
Project ':app'
------------------------------------------------------------

runtimeClasspath - Runtime classpath of source set 'main'.
+--- project :core
|    +--- com.google.guava:guava:31.1-jre
|    |    \\--- com.google.guava:failureaccess:1.0.1
|    \\--- org.slf4j:slf4j-api:1.7.36
+--- project :db
|    \\--- org.slf4j:slf4j-api:1.7.36 (*)
\\--- com.squareup.okhttp3:okhttp:4.12.0

(*) - dependencies omitted (listed previously)
"""


def _edges(projects: Projects) -> set[tuple[str, str]]:
    return {
        (d.source.name, d.target.name)
        for p in projects.list_projects()
        for d in p.list_dependencies()
    }


# ------------------------------------------------------------------
# parse_projects
# ------------------------------------------------------------------


def test_parse_projects_minimal() -> None:
    assert parse_projects("Root project 'app'\n+--- Project 'core'\n") == ["app", "core"]


def test_parse_projects_root_captured_once() -> None:
    result = parse_projects(_PROJECTS_OUTPUT)
    assert result == ["shop", ":app", ":app:checkout", ":core", ":db"]


def test_parse_projects_empty_input() -> None:
    assert parse_projects("") == []


def test_parse_projects_ignores_unrelated_lines() -> None:
    content = "BUILD SUCCESSFUL in 1s\nProject ':x' without tree prefix\n"
    assert parse_projects(content) == []


def test_parse_projects_without_root() -> None:
    assert parse_projects("+--- Project ':a'\n\\--- Project ':b'\n") == [":a", ":b"]


def test_parse_projects_requires_exact_line() -> None:
    assert parse_projects("Root project 'app' (extra)\n") == []


# ------------------------------------------------------------------
# parse_deps: basic scenarios
# ------------------------------------------------------------------


def test_parse_deps_two_direct_dependencies(projects: Projects) -> None:
    content = "Root project ':app'\n+--- project :core\n\\--- com.x:lib:1.0\n\n"
    parse_deps(projects, content, "build")

    assert len(projects) == 3
    assert _edges(projects) == {(":app", ":core"), (":app", "com.x:lib:1.0")}


def test_parse_deps_uses_given_root(projects: Projects) -> None:
    parse_deps(projects, "Project ':app'\n\\--- project :core\n", "shop")
    assert ("shop", ":app") in projects
    assert ("shop", ":core") in projects


def test_parse_deps_nested_child_attaches_to_parent(projects: Projects) -> None:
    content = (
        "Root project ':app'\n"
        "+--- project :core\n"
        "|    \\--- com.x:inner:1.0\n"
        "\\--- com.x:lib:1.0\n"
    )
    parse_deps(projects, content, "build")

    assert _edges(projects) == {
        (":app", ":core"),
        (":core", "com.x:inner:1.0"),
        (":app", "com.x:lib:1.0"),
    }


def test_parse_deps_full_report(projects: Projects) -> None:
    parse_deps(projects, _DEPS_OUTPUT, "shop")

    assert _edges(projects) == {
        (":app", ":core"),
        (":core", "com.google.guava:guava:31.1-jre"),
        ("com.google.guava:guava:31.1-jre", "com.google.guava:failureaccess:1.0.1"),
        (":core", "org.slf4j:slf4j-api:1.7.36"),
        (":app", ":db"),
        (":db", "org.slf4j:slf4j-api:1.7.36"),
        (":app", "com.squareup.okhttp3:okhttp:4.12.0"),
    }


def test_parse_deps_shared_node_is_single_registry_entry(projects: Projects) -> None:
    parse_deps(projects, _DEPS_OUTPUT, "shop")
    slf4j = projects.get("shop", "org.slf4j:slf4j-api:1.7.36")
    core = projects.get("shop", ":core")
    db = projects.get("shop", ":db")
    assert core.list_dependencies()[-1].target is slf4j
    assert db.list_dependencies()[0].target is slf4j


def test_parse_deps_stops_at_blank_line(projects: Projects) -> None:
    content = (
        "Project ':app'\n"
        "\\--- project :core\n"
        "\n"
        "+--- not-parsed\n"
        "garbage that would fail (*)\n"
    )
    parse_deps(projects, content, "b")
    assert len(projects) == 2


def test_parse_deps_ignores_lines_before_root(projects: Projects) -> None:
    content = "+--- before-root\nsome banner\nProject ':app'\n\\--- project :core\n"
    parse_deps(projects, content, "b")
    assert _edges(projects) == {(":app", ":core")}


def test_parse_deps_ignores_lines_before_first_branch(projects: Projects) -> None:
    content = (
        "Project ':app'\n"
        "-----------\n"
        "compileClasspath - Compile classpath.\n"
        "\\--- project :core\n"
    )
    parse_deps(projects, content, "b")
    assert _edges(projects) == {(":app", ":core")}


def test_parse_deps_no_root_line_does_nothing(projects: Projects) -> None:
    parse_deps(projects, "+--- project :core\n", "b")
    assert len(projects) == 0


def test_parse_deps_root_without_dependencies(projects: Projects) -> None:
    parse_deps(projects, "Project ':app'\n\nruntimeClasspath\nNo dependencies\n", "b")
    assert len(projects) == 1
    assert projects.get("b", ":app").list_dependencies() == []


def test_parse_deps_repeated_target_keeps_one_edge(projects: Projects) -> None:
    content = (
        "Project ':app'\n"
        "+--- com.x:lib:1.0\n"
        "\\--- com.x:lib:1.0\n"
    )
    parse_deps(projects, content, "b")
    assert len(projects.get("b", ":app").list_dependencies()) == 1


def test_parse_deps_sibling_after_deep_subtree(projects: Projects) -> None:
    content = (
        "Project ':app'\n"
        "+--- a\n"
        "|    \\--- b\n"
        "|         \\--- c\n"
        "\\--- d\n"
    )
    parse_deps(projects, content, "r")
    assert _edges(projects) == {(":app", "a"), ("a", "b"), ("b", "c"), (":app", "d")}


# ------------------------------------------------------------------
# parse_deps: errors
# ------------------------------------------------------------------


def test_parse_deps_malformed_line_raises_with_line(projects: Projects) -> None:
    content = "Project ':app'\n+--- project :core\n|    \n"
    with pytest.raises(GradleParseError) as excinfo:
        parse_deps(projects, content, "b")
    assert excinfo.value.line == "|    "
    assert "|    " in str(excinfo.value)


@pytest.mark.parametrize("line", ["+---", "+--- ", "|    \\---", "\\---"])
def test_parse_deps_branch_without_identifier_raises(projects: Projects, line: str) -> None:
    content = f"Project ':app'\n+--- project :core\n{line}\n"
    with pytest.raises(GradleParseError) as excinfo:
        parse_deps(projects, content, "b")
    assert excinfo.value.line == line
    assert ("b", "-") not in projects


def test_parse_deps_malformed_keeps_earlier_edges(projects: Projects) -> None:
    content = "Project ':app'\n+--- project :core\n(c) - constraint\n"
    with pytest.raises(GradleParseError):
        parse_deps(projects, content, "b")
    assert _edges(projects) == {(":app", ":core")}


def test_parse_error_is_value_error() -> None:
    assert issubclass(GradleParseError, ValueError)
