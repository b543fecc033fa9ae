"""Expansion of a parameter template into individual run configurations.

Rule: anything that is a list is a sweep axis with many values, everything
else is one value. Tuples, strings, dicts and numpy arrays are therefore
held constant, which lets a single parameter itself be a compound value.
Unordered or one-shot iterables (sets, ranges, generators, dict views) are
rejected because their meaning as a sweep axis is ambiguous.

Axis order follows the template's insertion order and the first-listed axis
varies fastest:

    dict_list({"a": [1, 2], "run": ["bi", "tri"]}) ==
        [{"a": 1, "run": "bi"}, {"a": 2, "run": "bi"},
         {"a": 1, "run": "tri"}, {"a": 2, "run": "tri"}]
"""

import copy
import enum
import itertools
import logging
import math
from collections.abc import ItemsView, Iterator, KeysView, Mapping, ValuesView
from typing import Any, Dict, List, Tuple

from labwatson.exceptions import InvalidTemplate
from labwatson.models import ValueKind, classify

logger = logging.getLogger(__name__)

_AMBIGUOUS_TYPES = (set, frozenset, range, Iterator, KeysView, ValuesView, ItemsView)


def _sweep_axes(template: Any) -> List[Tuple[Any, list]]:
    """Validate the template and return its (key, values) sweep axes in order.

    Raises:
        InvalidTemplate: If the template is not a mapping, has non-string keys,
            or holds an ambiguous iterable
    """
    if not isinstance(template, Mapping):
        raise InvalidTemplate(
            f"dict_list expects a mapping, got {type(template).__name__}"
        )

    axes = []
    for key, value in template.items():
        if not isinstance(key, (str, enum.Enum)):
            raise InvalidTemplate(f"Template keys must be strings, got {key!r}")
        if isinstance(value, _AMBIGUOUS_TYPES):
            raise InvalidTemplate(
                f"Value of '{key}' is a {type(value).__name__}; use a list to sweep "
                "over it or a tuple to keep it as a single parameter"
            )
        if classify(value) is ValueKind.SEQUENCE:
            axes.append((key, value))
    return axes


def iter_dict_list(template: Mapping) -> Iterator[Dict[Any, Any]]:
    """Lazily yield every configuration dict_list would return.

    Each yielded dictionary is an independent deep copy.
    """
    axes = _sweep_axes(template)
    if not axes:
        yield copy.deepcopy(dict(template))
        return

    # itertools.product varies its last argument fastest
    axis_keys = [key for key, _ in reversed(axes)]
    axis_values = [values for _, values in reversed(axes)]

    for combination in itertools.product(*axis_values):
        chosen = dict(zip(axis_keys, combination))
        yield {
            key: copy.deepcopy(chosen[key] if key in chosen else value)
            for key, value in template.items()
        }


def dict_list(template: Mapping) -> List[Dict[Any, Any]]:
    """Expand template into the list of all its configurations.

    Each entry has a unique combination from the product of the list values
    of the template, while non-list values are kept constant. All entries
    have the template's keys.

    Args:
        template: Mapping whose list values are sweep axes

    Returns:
        List of configurations (empty if any axis is empty)

    Raises:
        InvalidTemplate: If the template is malformed

    Example:
        >>> dict_list({"a": [1, 2], "b": 4})
        [{'a': 1, 'b': 4}, {'a': 2, 'b': 4}]
    """
    configs = list(iter_dict_list(template))
    logger.debug(f"Expanded template with keys {list(template)} into {len(configs)} configurations")
    return configs


def dict_list_count(template: Mapping) -> int:
    """Return the number of configurations dict_list(template) produces.

    Computed from the axis lengths without materializing the product.
    """
    return math.prod(len(values) for _, values in _sweep_axes(template))
