"""Locating a project and navigating its directories.

A project is any directory holding a project marker (pyproject.toml,
setup.cfg or setup.py). Instead of a global "active project", callers get a
ProjectContext from quickactivate() and pass it to whatever needs paths, so
scripts keep working no matter where the project folder is moved.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from labwatson.config import ProjectLayout
from labwatson.constants import PROJECT_FILE, PROJECT_MARKERS
from labwatson.exceptions import ProjectNameMismatchError, ProjectNotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ProjectContext:
    """Resolved project root plus its directory layout.

    Attributes:
        root: Absolute path of the project directory
        name: Project name
        layout: Names of the standard subdirectories

    Usage:
        project = quickactivate(__file__, "my-study")
        file = project.sims_dir("runs", "a=1.json")
    """

    root: Path
    name: str
    layout: ProjectLayout = field(default_factory=ProjectLayout)

    @classmethod
    def from_root(cls, root: PathLike, layout: Optional[ProjectLayout] = None) -> "ProjectContext":
        """Create a context for a known project root."""
        resolved = Path(root).resolve()
        return cls(root=resolved, name=project_name(resolved), layout=layout or ProjectLayout())

    def project_dir(self, *parts: str) -> Path:
        """Return the project root joined with parts."""
        return self.root.joinpath(*parts)

    def _subdir(self, entry: str, parts: tuple) -> Path:
        return self.root.joinpath(entry, *parts)

    def data_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.data, parts)

    def sims_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.sims, parts)

    def exp_raw_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.exp_raw, parts)

    def exp_pro_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.exp_pro, parts)

    def src_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.src, parts)

    def plots_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.plots, parts)

    def scripts_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.scripts, parts)

    def papers_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.papers, parts)

    def notebooks_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.notebooks, parts)

    def videos_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.videos, parts)

    def research_dir(self, *parts: str) -> Path:
        return self._subdir(self.layout.research, parts)


def find_project(path: Optional[PathLike] = None) -> Optional[Path]:
    """Search path and its parents for a project marker file.

    The search stops at the home directory or the filesystem root.

    Args:
        path: Directory (or file) to start from (default: current directory)

    Returns:
        The project root, or None (with a warning) if none is found
    """
    start = Path(path).resolve() if path is not None else Path.cwd().resolve()
    current = start if start.is_dir() else start.parent
    home = Path.home().resolve()

    while True:
        if any((current / marker).is_file() for marker in PROJECT_MARKERS):
            return current
        if current == home or current.parent == current:
            break
        current = current.parent

    logger.warning(f"No project found in {start} or any of its parents")
    return None


def project_name(root: PathLike) -> str:
    """Return the project name from pyproject.toml, or the folder name."""
    root = Path(root)
    project_file = root / PROJECT_FILE
    if project_file.is_file():
        try:
            with open(project_file, "rb") as f:
                name = tomllib.load(f).get("project", {}).get("name")
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not read {project_file}: {e}")
            name = None
        if isinstance(name, str) and name:
            return name
    return root.name


def quickactivate(
    path: Optional[PathLike] = None,
    name: Optional[str] = None,
    layout: Optional[ProjectLayout] = None,
) -> ProjectContext:
    """Find the project containing path and return its context.

    Args:
        path: Directory or file inside the project (default: current directory)
        name: If given, the project must have this name
        layout: Subdirectory layout (default: ProjectLayout())

    Returns:
        The project context

    Raises:
        ProjectNotFoundError: If no project contains path
        ProjectNameMismatchError: If the project's name differs from name
    """
    root = find_project(path)
    if root is None:
        raise ProjectNotFoundError(f"No project found for {path or Path.cwd()}")

    context = ProjectContext.from_root(root, layout)
    if name is not None and context.name != name:
        raise ProjectNameMismatchError(
            f"Activated project '{context.name}' at {root} does not match expected name '{name}'"
        )

    logger.info(f"Activated project '{context.name}' at {root}")
    return context
