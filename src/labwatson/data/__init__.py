"""Data package for preparing, saving and collecting simulation results.

This package provides:
- Expansion of parameter templates into run configurations
- A file-backed artifact store (json, npz, pickle)
- Git commit tagging of saved results
- Produce-or-load caching keyed by savename
- Directory scanning and collection of results into a table
"""

from labwatson.data.expansion import dict_list, dict_list_count, iter_dict_list
from labwatson.data.storage import exists, load, save
from labwatson.data.tagging import current_commit, tag, tagsave
from labwatson.data.produce import produce_or_load
from labwatson.data.scanner import iter_result_files
from labwatson.data.collection import (
    ResultRecord,
    ResultTable,
    build_row,
    collect,
    collect_results,
)

__all__ = [
    # Expansion
    "dict_list",
    "dict_list_count",
    "iter_dict_list",
    # Storage
    "exists",
    "load",
    "save",
    # Tagging
    "current_commit",
    "tag",
    "tagsave",
    # Produce or load
    "produce_or_load",
    # Collection
    "iter_result_files",
    "ResultRecord",
    "ResultTable",
    "build_row",
    "collect",
    "collect_results",
]
