"""labwatson: helpers for running and organizing scientific projects.

- Project setup and navigation (initialize_project, quickactivate)
- Naming results after their parameters (savename)
- Preparing batches of runs (dict_list, dict_list_count)
- Saving with git provenance (tag, tagsave, produce_or_load)
- Collecting saved results into a table (collect_results)
"""

from labwatson.config import CollectConfig, NamingPolicy, ProjectLayout
from labwatson.models import ValueKind, classify
from labwatson.exceptions import (
    ExtractorFailure,
    InvalidPolicy,
    InvalidTemplate,
    LabWatsonError,
    LoadFailure,
    ProjectError,
    ProjectExistsError,
    ProjectNameMismatchError,
    ProjectNotFoundError,
    UnsupportedContainer,
    UnsupportedFormat,
)
from labwatson.naming import (
    ParameterAdapter,
    access,
    all_access,
    dict_of,
    dict_to_ntuple,
    ntuple_to_dict,
    register_adapter,
    savename,
)
from labwatson.data import (
    ResultRecord,
    ResultTable,
    collect,
    collect_results,
    current_commit,
    dict_list,
    dict_list_count,
    produce_or_load,
    tag,
    tagsave,
)
from labwatson.project import (
    ProjectContext,
    find_project,
    initialize_project,
    project_name,
    quickactivate,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "CollectConfig",
    "NamingPolicy",
    "ProjectLayout",
    "ValueKind",
    "classify",
    # Errors
    "LabWatsonError",
    "InvalidPolicy",
    "InvalidTemplate",
    "UnsupportedContainer",
    "LoadFailure",
    "UnsupportedFormat",
    "ExtractorFailure",
    "ProjectError",
    "ProjectNotFoundError",
    "ProjectNameMismatchError",
    "ProjectExistsError",
    # Naming
    "ParameterAdapter",
    "access",
    "all_access",
    "dict_of",
    "dict_to_ntuple",
    "ntuple_to_dict",
    "register_adapter",
    "savename",
    # Runs and results
    "dict_list",
    "dict_list_count",
    "current_commit",
    "tag",
    "tagsave",
    "produce_or_load",
    "ResultRecord",
    "ResultTable",
    "collect",
    "collect_results",
    # Project
    "ProjectContext",
    "find_project",
    "initialize_project",
    "project_name",
    "quickactivate",
]
