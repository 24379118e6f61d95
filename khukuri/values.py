"""Runtime values for Khukuri.

This module defines the runtime value model used by the interpreter and
the rules shared by printing, string concatenation and conditions:

* Number   -> Python `float`
* String   -> Python `str`
* Boolean  -> Python `bool`
* List     -> `ListVal`
* Dictionary -> `DictVal` (string keys)
* Null     -> the `NULL` singleton

Values have value semantics. Whenever a value is read out of a variable or
a container the interpreter hands back a copy (see `copy_value`), so
mutating one list never changes another.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List


class NullVal:
    """Marker type for the Khukuri `null` value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'null'


NULL = NullVal()


@dataclass
class ListVal:
    """An ordered sequence of values."""
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"List({self.items!r})"


@dataclass
class DictVal:
    """A mapping from string keys to values."""
    entries: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Dictionary({self.entries!r})"


def type_name(value: Any) -> str:
    """Return the Khukuri type name of a runtime value."""
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, float):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ListVal):
        return 'List'
    if isinstance(value, DictVal):
        return 'Dictionary'
    if isinstance(value, NullVal):
        return 'Null'
    return type(value).__name__


def format_number(n: float) -> str:
    """Render a number the way `bhan` prints it.

    Integral values print without a decimal point (`3`, not `3.0`). Other
    values use the shortest round-tripping digits in positional notation,
    so `1e-07` prints as `0.0000001`.
    """
    if math.isnan(n):
        return 'NaN'
    if math.isinf(n):
        return 'inf' if n > 0 else '-inf'
    if n == math.floor(n):
        return str(int(n))
    return format(Decimal(repr(n)), 'f')


def to_string(value: Any) -> str:
    """Convert a value to its display form, used by print and concatenation."""
    if isinstance(value, bool):
        return 'sahi' if value else 'galat'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, DictVal):
        entries = ', '.join(f'"{k}": {to_string(v)}' for k, v in value.entries.items())
        return '{' + entries + '}'
    if isinstance(value, NullVal):
        return 'null'
    return str(value)


def is_truthy(value: Any) -> bool:
    # Null, galat, 0 and empty collections are false; everything else is true.
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value != 0.0
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, ListVal):
        return len(value.items) > 0
    if isinstance(value, DictVal):
        return len(value.entries) > 0
    if isinstance(value, NullVal):
        return False
    return bool(value)


def copy_value(value: Any) -> Any:
    """Return an independent copy of a value (containers are copied deeply)."""
    if isinstance(value, ListVal):
        return ListVal([copy_value(item) for item in value.items])
    if isinstance(value, DictVal):
        return DictVal({k: copy_value(v) for k, v in value.entries.items()})
    return value
