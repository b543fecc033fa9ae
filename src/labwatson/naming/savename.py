"""Deterministic, human-readable names from parameter containers.

savename chains sorted key=value pairs into one string:

    prefix_key1=val1_key2=val2_key3=val3.suffix

Floats are rounded and printed as integers when rounding makes them whole,
so the same parameters always map to the same file name.
"""

import enum
import logging
import math
import numbers
from typing import Any, Optional, Tuple

from labwatson.config import NamingPolicy
from labwatson.constants import PATH_SEPARATORS
from labwatson.exceptions import InvalidPolicy
from labwatson.models import ValueKind, classify
from labwatson.naming.access import as_parameters, default_allowed, default_prefix

logger = logging.getLogger(__name__)


def render_value(value: Any, digits: int) -> str:
    """Render one parameter value for use in a name.

    Args:
        value: The value to render
        digits: Decimal places floating point values are rounded to

    Returns:
        The rendered token
    """
    if isinstance(value, enum.Enum):
        return value.name
    if classify(value) is ValueKind.NUMERIC:
        if isinstance(value, numbers.Integral):
            return str(int(value))
        number = float(value)
        if not math.isfinite(number):
            return str(number)
        rounded = round(number, digits)
        if rounded == round(number, 0):
            return str(int(round(number)))
        return str(rounded)
    return str(value)


def render_key(key: Any) -> str:
    if isinstance(key, enum.Enum):
        return key.name
    return str(key)


def encode(container: Any, policy: NamingPolicy) -> str:
    """Encode a parameter container into a name using an explicit policy.

    The policy's prefix is used as given (no default_prefix lookup).

    Args:
        container: Mapping or any value with a ParameterSet adapter
        policy: Naming options

    Returns:
        The encoded name
    """
    source = as_parameters(container)
    present = set(source.keys())
    keys = policy.accesses if policy.accesses is not None else tuple(present)
    allowed = (
        frozenset(policy.allowed_kinds)
        if policy.allowed_kinds is not None
        else default_allowed(container)
    )

    selected = []
    for key in keys:
        if key not in present:
            continue
        value = source.get(key)
        if classify(value) in allowed:
            selected.append((render_key(key), value))

    selected.sort(key=lambda pair: pair[0])
    body = policy.connector.join(
        f"{key}={render_value(value, policy.digits)}" for key, value in selected
    )

    name = body
    if policy.prefix:
        if not body:
            name = policy.prefix
        elif policy.prefix.endswith(PATH_SEPARATORS):
            name = policy.prefix + body
        else:
            name = policy.prefix + policy.connector + body

    if policy.suffix:
        suffix = policy.suffix[1:] if policy.suffix.startswith(".") else policy.suffix
        name = f"{name}.{suffix}"

    return name


def _split_args(args: Tuple[Any, ...]) -> Tuple[Optional[str], Any, Optional[str]]:
    """Split savename's positional arguments into (prefix, container, suffix)."""
    if len(args) == 1:
        return None, args[0], None
    if len(args) == 2:
        first, second = args
        if isinstance(first, str):
            return first, second, None
        if isinstance(second, str):
            return None, first, second
        raise TypeError("savename(a, b) needs either a string prefix or a string suffix")
    if len(args) == 3:
        prefix, container, suffix = args
        if not isinstance(prefix, str) or not isinstance(suffix, str):
            raise TypeError("savename(prefix, c, suffix) needs string prefix and suffix")
        return prefix, container, suffix
    raise TypeError(f"savename takes 1 to 3 positional arguments, got {len(args)}")


def savename(
    *args: Any,
    policy: Optional[NamingPolicy] = None,
    allowed_kinds: Optional[Any] = None,
    accesses: Optional[Any] = None,
    digits: Optional[int] = None,
    connector: Optional[str] = None,
) -> str:
    """Create a shorthand name, commonly used for saving a file.

    Call as savename(c), savename(prefix, c), savename(c, suffix) or
    savename(prefix, c, suffix). A prefix ending in '/' or '\\' is treated as
    a directory and joined without the connector; the suffix is appended
    after a '.'.

    Args:
        *args: [prefix,] container [, suffix]
        policy: Base naming policy; keyword options override its fields
        allowed_kinds: Only values of these kinds are used
            (default: numeric, text and boolean, or the adapter's choice)
        accesses: Keys to use (default: all keys of the container)
        digits: Decimal places floats are rounded to (default 3)
        connector: String joining the entries (default '_')

    Returns:
        The name

    Raises:
        InvalidPolicy: If the options are malformed

    Examples:
        >>> d = {"a": 0.153456453, "b": 5.0, "mode": "double"}
        >>> savename(d, digits=4)
        'a=0.1535_b=5_mode=double'
        >>> savename("data/n", d, "n")
        'data/n_a=0.153_b=5_mode=double.n'
    """
    prefix, container, suffix = _split_args(args)
    base = policy if policy is not None else NamingPolicy()
    if not isinstance(base, NamingPolicy):
        raise InvalidPolicy(f"policy must be a NamingPolicy, got {type(base).__name__}")

    if prefix is None and not base.prefix:
        prefix = default_prefix(container)

    resolved = base.with_overrides(
        allowed_kinds=allowed_kinds,
        accesses=accesses,
        digits=digits,
        connector=connector,
        prefix=prefix or None,
        suffix=suffix or None,
    )
    return encode(container, resolved)
