"""
Parameter type deduction and coercion for bound statement values.

Each value appended to a statement is bound with a concrete type deduced from
its runtime type:

- ``None``                                  -> NULL
- ``bool``                                  -> BOOL
- ``int``, integer-valued ``float``,
  integer-valued numeric ``str`` ("42"),
  within the signed 64-bit range            -> INT
- everything else                           -> STR

The coerced value is what the driver receives.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, NamedTuple

# Canonical integer literal: no leading zeros (so "007" stays text), optional minus.
_INT_LITERAL = re.compile(r"^-?(0|[1-9][0-9]*)$")

# Signed 64-bit range; larger integers bind as text so drivers never overflow.
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class ParamType(str, Enum):
    """Bind type of a statement value."""

    NULL = "null"
    INT = "int"
    BOOL = "bool"
    STR = "str"


class SqlParameter(NamedTuple):
    """A value ready to bind: placeholder key (index or name), coerced value, type."""

    key: int | str
    value: Any
    param_type: ParamType


def deduce_param_type(value: Any) -> ParamType:
    """Find the best bind type for *value*."""
    if value is None:
        return ParamType.NULL
    if isinstance(value, bool):
        return ParamType.BOOL
    if isinstance(value, int):
        return ParamType.INT if _INT_MIN <= value <= _INT_MAX else ParamType.STR
    if isinstance(value, float):
        return ParamType.INT if value.is_integer() and _INT_MIN <= value <= _INT_MAX else ParamType.STR
    if isinstance(value, str) and _INT_LITERAL.match(value.strip()):
        return ParamType.INT if _INT_MIN <= int(value) <= _INT_MAX else ParamType.STR
    return ParamType.STR


def _coerce_str(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return value
    return str(value)


_COERCERS: dict[ParamType, Any] = {
    ParamType.NULL: lambda v: None,
    ParamType.INT: lambda v: int(float(v)) if isinstance(v, float) else int(v),
    ParamType.BOOL: bool,
    ParamType.STR: _coerce_str,
}


def coerce_value(value: Any) -> tuple[Any, ParamType]:
    """Return (coerced value, bind type) for *value*."""
    param_type = deduce_param_type(value)
    return _COERCERS[param_type](value), param_type


def typed_parameters(values: dict[str, Any] | list[Any]) -> list[SqlParameter]:
    """Deduce and coerce every statement value.

    Positional values (a list) get their 0-based index as key; named values
    (a dict) keep their name.
    """
    items = values.items() if isinstance(values, dict) else enumerate(values)
    params: list[SqlParameter] = []
    for key, raw in items:
        value, param_type = coerce_value(raw)
        params.append(SqlParameter(key, value, param_type))
    return params


def driver_params(params: list[SqlParameter]) -> dict[str, Any] | list[Any] | None:
    """Shape typed parameters for ``cursor.execute``: list, dict or None."""
    if not params:
        return None
    if isinstance(params[0].key, str):
        return {p.key: p.value for p in params}
    return [p.value for p in params]
