"""Gradle build importer: runs the wrapper and feeds its reports to the parsers.

Security requirements:
- shell=False always (no command injection).
- The wrapper is resolved inside the build root; module names are passed as
  single argv entries, never interpolated into a shell string.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from archer.gradle.parser import GradleParseError, parse_deps, parse_projects
from archer.model import Project, Projects, ProjectType

_BUILD_FILES = ("build.gradle.kts", "build.gradle")


class GradleError(RuntimeError):
    """Raised when the Gradle wrapper is missing, fails, or times out."""


class GradleRunner:
    """Run Gradle tasks for one build root and return their stdout.

    Args:
        root_dir: Directory holding the wrapper script.
        command: Wrapper file name, relative to *root_dir*.
        timeout: Seconds before a task is abandoned.
    """

    def __init__(self, root_dir: Path | str, command: str = "gradlew", timeout: int = 600) -> None:
        self.root_dir = Path(root_dir)
        self.command = command
        self.timeout = timeout

    def list_projects(self) -> list[str]:
        """Return module names of the build, root module first."""
        return parse_projects(self._run(["projects"]))

    def dependencies(self, module: str, configuration: str, *, is_root: bool = False) -> str:
        """Return the ``dependencies`` report of *module* for *configuration*."""
        task = "dependencies" if is_root else f"{module}:dependencies"
        return self._run([task, "--configuration", configuration])

    def _run(self, args: list[str]) -> str:
        wrapper = self.root_dir / self.command
        if not wrapper.exists():
            raise GradleError(f"Gradle wrapper not found: {wrapper}")

        try:
            result = subprocess.run(
                [str(wrapper.resolve()), *args],
                cwd=self.root_dir,
                shell=False,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as exc:
            raise GradleError(
                f"gradle {' '.join(args)} failed (exit {exc.returncode}): {(exc.stderr or '').strip()}"
            ) from None
        except subprocess.TimeoutExpired:
            raise GradleError(
                f"gradle {' '.join(args)} timed out after {self.timeout}s"
            ) from None
        except OSError as exc:
            raise GradleError(f"cannot run {wrapper}: {exc.strerror}") from None

        return result.stdout


class GradleImporter:
    """Populate a registry with the modules of a Gradle build and their deps.

    Every module listed by ``gradle projects`` becomes a ``CODE`` project with
    its directory information filled in; every other node met in the reports
    stays an external dependency.

    Args:
        runner: Runner bound to the build root.
        root: Root identifier for the created projects.
        configuration: Gradle configuration whose tree is imported.
    """

    def __init__(self, runner: GradleRunner, root: str, configuration: str = "runtimeClasspath") -> None:
        self.runner = runner
        self.root = root
        self.configuration = configuration

    def import_projects(self, projects: Projects) -> list[Project]:
        """Run the import and return every project it touched, in listing order.

        Configuration on edges that still exist after the re-import is kept.

        Raises:
            GradleError: if a Gradle task fails.
            GradleParseError: if a module's report is malformed.
        """
        modules = self.runner.list_projects()
        edge_config = _snapshot_edge_config(projects, self.root)

        for module in modules:
            report = self.runner.dependencies(
                module, self.configuration, is_root=not module.startswith(":")
            )
            try:
                parse_deps(projects, report, self.root)
            except GradleParseError as exc:
                exc.module = module
                raise

        for module in modules:
            self._describe_module(projects.get(self.root, module))

        touched = [p for p in projects.list_projects() if p.root == self.root]
        for p in touched:
            if p.is_external_dependency() and not p.name_parts:
                p.name_parts = external_name_parts(p.name)
            _restore_edge_config(p, edge_config.get(p.name, {}))
        return touched

    def _describe_module(self, project: Project) -> None:
        project.type = ProjectType.CODE
        project.name_parts = module_name_parts(project.name)

        root_dir = self.runner.root_dir.resolve()
        module_dir = root_dir
        if project.name.startswith(":"):
            module_dir = root_dir.joinpath(*project.name_parts)

        project.root_dir = str(root_dir)
        project.dir = str(module_dir)
        project.project_file = ""
        for build_file in _BUILD_FILES:
            if (module_dir / build_file).exists():
                project.project_file = str(module_dir / build_file)
                break


def _snapshot_edge_config(projects: Projects, root: str) -> dict[str, dict[str, dict[str, str]]]:
    """``{source name: {target name: config}}`` for configured edges under *root*."""
    result: dict[str, dict[str, dict[str, str]]] = {}
    for p in projects.list_projects():
        if p.root != root:
            continue
        configured = {d.target.name: d.config for d in p.list_dependencies() if d.config}
        if configured:
            result[p.name] = configured
    return result


def _restore_edge_config(project: Project, configs: dict[str, dict[str, str]]) -> None:
    # Re-parsing replaces every edge it meets and drops its config; earlier
    # values are copied onto the new edge to the same target.
    for dep in project.list_dependencies():
        for key, value in configs.get(dep.target.name, {}).items():
            dep.set_config(key, value)


def module_name_parts(name: str) -> list[str]:
    """``":app:core"`` → ``["app", "core"]``."""
    return [p for p in name.split(":") if p]


def external_name_parts(name: str) -> list[str]:
    """``"group:artifact:version"`` → ``["group", "artifact"]``."""
    parts = [p for p in name.split(":") if p]
    return parts[:2]
