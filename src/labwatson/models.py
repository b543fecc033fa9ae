"""Value classification shared by naming and expansion.

Parameter values are heterogeneous, so both savename's type filter and
dict_list's sweep-axis detection work on a closed set of kinds instead of
ad-hoc isinstance chains scattered through the code.
"""

import enum
import numbers
from typing import Any, FrozenSet

import numpy as np


class ValueKind(enum.Enum):
    """Closed set of categories a parameter value can fall into.

    NUMERIC: real numbers (int, float, numpy scalars), excluding booleans
    TEXT: strings and enum members (enum members render by name)
    BOOLEAN: bool and numpy.bool_
    SEQUENCE: list, the only type treated as a sweep axis
    OPAQUE: anything else (tuples, dicts, arrays, None, custom objects)
    """

    NUMERIC = "numeric"
    TEXT = "text"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    OPAQUE = "opaque"


# Kinds used by savename when nothing else is requested
DEFAULT_ALLOWED_KINDS: FrozenSet[ValueKind] = frozenset(
    {ValueKind.NUMERIC, ValueKind.TEXT, ValueKind.BOOLEAN}
)


def classify(value: Any) -> ValueKind:
    """Return the ValueKind of a parameter value."""
    # bool subclasses int, so it has to be checked first
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Real):
        return ValueKind.NUMERIC
    if isinstance(value, (str, enum.Enum)):
        return ValueKind.TEXT
    if isinstance(value, list):
        return ValueKind.SEQUENCE
    return ValueKind.OPAQUE


def parse_kind(kind: Any) -> ValueKind:
    """Coerce a ValueKind or its string value (e.g. 'numeric') to a ValueKind.

    Raises:
        ValueError: If the value names no kind
    """
    if isinstance(kind, ValueKind):
        return kind
    return ValueKind(str(kind).lower())
