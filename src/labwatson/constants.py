"""Shared constants for labwatson.

This module consolidates reserved field names, file-format suffixes and the
default project layout used across naming, storage, collection and project
setup.
"""

from typing import Dict, Tuple

# =============================================================================
# Reserved Field Names
# =============================================================================

# Field added by tag() holding the git commit of the producing code
COMMIT_FIELD: str = "commit"

# Column of a ResultTable holding the file each row was loaded from
PATH_FIELD: str = "path"

# Appended to the commit id when the work tree has uncommitted changes
DIRTY_SUFFIX: str = "_dirty"

# =============================================================================
# Naming
# =============================================================================

DEFAULT_DIGITS: int = 3
DEFAULT_CONNECTOR: str = "_"

# A prefix ending in one of these is treated as a directory (no connector)
PATH_SEPARATORS: Tuple[str, ...] = ("/", "\\")

# =============================================================================
# Storage
# =============================================================================

JSON_SUFFIX: str = ".json"
NPZ_SUFFIX: str = ".npz"
PICKLE_SUFFIX: str = ".pkl"

# Pickle round-trips any value, so produced results load back unchanged
DEFAULT_SAVE_SUFFIX: str = "pkl"
DEFAULT_VALID_FILETYPES: Tuple[str, ...] = (JSON_SUFFIX,)

# Persisted table name: results_<folder name><suffix>
RESULTS_TABLE_PREFIX: str = "results_"

# =============================================================================
# Project Layout
# =============================================================================

# Files whose presence marks a directory as a project root
PROJECT_MARKERS: Tuple[str, ...] = ("pyproject.toml", "setup.cfg", "setup.py")

PROJECT_FILE: str = "pyproject.toml"

# Short descriptions (by ProjectLayout field) written into the generated README
PROJECT_TREE_DESCRIPTIONS: Dict[str, str] = {
    "research": "WIP scripts, code, notes and anything in an alpha state",
    "data": "All data",
    "sims": "Data resulting directly from simulations",
    "exp_raw": "Raw experimental data",
    "exp_pro": "Data from processing experiments",
    "notebooks": "Notebooks",
    "papers": "Scientific papers resulting from the project",
    "plots": "All plots",
    "scripts": "Scripts that produce output (data, plots, console output)",
    "src": "Source code shared by scripts; defines functions, outputs nothing",
    "videos": "Videos",
}

GITIGNORE_TEMPLATE: str = """\
# Data and generated artifacts
/data/
/plots/
/videos/
/papers/

# Python
__pycache__/
*.py[cod]
*.egg-info/
.venv/

# Editors and OS
.ipynb_checkpoints/
.vscode/
.idea/
.DS_Store
"""
