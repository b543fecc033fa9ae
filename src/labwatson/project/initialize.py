"""Creating a new project with the default directory structure."""

import json
import logging
import shutil
import subprocess
from dataclasses import fields
from pathlib import Path
from typing import Iterable, Optional, Union

from labwatson.config import ProjectLayout
from labwatson.constants import GITIGNORE_TEMPLATE, PROJECT_FILE, PROJECT_TREE_DESCRIPTIONS
from labwatson.data.tagging import run_git
from labwatson.exceptions import ProjectExistsError
from labwatson.project.context import ProjectContext

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _normalize_authors(authors: Optional[Union[str, Iterable[str]]]) -> list:
    if authors is None:
        return []
    if isinstance(authors, str):
        return [authors]
    return [str(a) for a in authors]


def _project_file_text(name: str, authors: list) -> str:
    # json.dumps yields valid TOML basic strings
    lines = [
        "[project]",
        f"name = {json.dumps(name)}",
        'version = "0.1.0"',
    ]
    if authors:
        entries = ", ".join(f"{{ name = {json.dumps(a)} }}" for a in authors)
        lines.append(f"authors = [{entries}]")
    return "\n".join(lines) + "\n"


def _readme_text(name: str, layout: ProjectLayout) -> str:
    lines = [
        f"# {name}",
        "",
        "Scientific project managed with labwatson.",
        "",
        "To reproduce it, clone the repository, install its environment and run",
        "the scripts; they locate this folder with `labwatson.quickactivate`.",
        "",
        "## Layout",
        "",
    ]
    for f in fields(layout):
        description = PROJECT_TREE_DESCRIPTIONS.get(f.name, "")
        lines.append(f"- `{getattr(layout, f.name)}/`: {description}")
    return "\n".join(lines) + "\n"


def _init_git(root: Path) -> None:
    if shutil.which("git") is None:
        logger.warning("git executable not found; project is not a git repository")
        return
    try:
        run_git(root, "init")
        run_git(root, "add", "-A")
        run_git(root, "commit", "-m", "Initial commit")
    except (OSError, subprocess.CalledProcessError) as e:
        stderr = getattr(e, "stderr", "") or ""
        logger.warning(f"Git initialization of {root} incomplete: {e} {stderr.strip()}")
        return
    logger.info(f"Initialized git repository in {root}")


def initialize_project(
    path: PathLike,
    name: Optional[str] = None,
    readme: bool = True,
    authors: Optional[Union[str, Iterable[str]]] = None,
    force: bool = False,
    git: bool = True,
    layout: Optional[ProjectLayout] = None,
) -> ProjectContext:
    """Initialize a scientific project inside path.

    Args:
        path: Project directory (created if missing)
        name: Project name (default: the folder name)
        readme: Add a README.md describing the layout
        authors: Author name or names written to pyproject.toml
        force: If path is not empty, delete its contents instead of failing
        git: Make the project a git repository with an initial commit
        layout: Subdirectory layout (default: ProjectLayout())

    Returns:
        Context of the new project

    Raises:
        ProjectExistsError: If path is not empty and force is False
    """
    root = Path(path).resolve()
    layout = layout or ProjectLayout()

    if root.exists() and any(root.iterdir()):
        if not force:
            raise ProjectExistsError(
                f"{root} is not empty; use force=True to overwrite it"
            )
        logger.warning(f"Deleting existing contents of {root}")
        shutil.rmtree(root)

    name = name or root.name
    root.mkdir(parents=True, exist_ok=True)
    for f in fields(layout):
        (root / getattr(layout, f.name)).mkdir(parents=True, exist_ok=True)

    (root / PROJECT_FILE).write_text(
        _project_file_text(name, _normalize_authors(authors)), encoding="utf-8"
    )
    (root / ".gitignore").write_text(GITIGNORE_TEMPLATE, encoding="utf-8")
    if readme:
        (root / "README.md").write_text(_readme_text(name, layout), encoding="utf-8")

    logger.info(f"Initialized project '{name}' at {root}")
    if git:
        _init_git(root)

    return ProjectContext(root=root, name=name, layout=layout)
