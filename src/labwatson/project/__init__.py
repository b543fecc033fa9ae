"""Project setup and navigation."""

from labwatson.project.context import ProjectContext, find_project, project_name, quickactivate
from labwatson.project.initialize import initialize_project

__all__ = [
    "ProjectContext",
    "find_project",
    "initialize_project",
    "project_name",
    "quickactivate",
]
