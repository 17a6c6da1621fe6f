"""Gradle build import: output parsers and the wrapper runner."""

from archer.gradle.importer import GradleError, GradleImporter, GradleRunner
from archer.gradle.parser import GradleParseError, parse_deps, parse_projects

__all__ = [
    "GradleError",
    "GradleImporter",
    "GradleParseError",
    "GradleRunner",
    "parse_deps",
    "parse_projects",
]
