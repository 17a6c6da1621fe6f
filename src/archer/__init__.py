"""Archer — dependency graph of build modules and database tables."""

from archer.model import (
    Dependency,
    FilterType,
    InvalidArgumentError,
    Project,
    Projects,
    ProjectType,
    Size,
)

__all__ = [
    "Dependency",
    "FilterType",
    "InvalidArgumentError",
    "Project",
    "Projects",
    "ProjectType",
    "Size",
]
