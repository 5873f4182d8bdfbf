"""Typed assignment: coerce values to the shape of a prototype value.

A prototype value carries its semantics by example. ``Decimal("0.00")`` is a
two-place decimal, ``0`` an integer, ``""`` a string. Assigning through the
prototype keeps that shape:

    assign_value(Decimal("0.00"), 2.5)    # Decimal("2.50")
    assign_value(0, Decimal("3"))         # 3
    assign_value("", 3)                   # TypeMismatch
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from numbers import Number
from typing import Any

from entitycore.errors import TypeMismatch


def _mismatch(proto: Any, value: Any, field: str | None) -> TypeMismatch:
    return TypeMismatch(
        "Value not assignable to field type",
        field=field,
        expected=type(proto).__name__,
        value=value,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _to_decimal(proto: Decimal, value: Any, field: str | None) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        raise _mismatch(proto, value, field)
    exponent = proto.as_tuple().exponent
    if not isinstance(exponent, int) or not result.is_finite():
        return result
    try:
        return result.quantize(Decimal(1).scaleb(exponent), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise _mismatch(proto, value, field) from e


def assign_value(proto: Any, value: Any, field: str | None = None) -> Any:
    """Return ``value`` coerced to the type of ``proto``.

    Args:
        proto: Prototype value defining the target shape. ``None`` accepts anything.
        value: Value being assigned. ``None`` is always assignable.
        field: Field name, for error context only.

    Returns:
        The coerced value.

    Raises:
        TypeMismatch: If value cannot take the prototype's shape.
    """
    if value is None or proto is None:
        return value

    if isinstance(proto, bool):
        if isinstance(value, bool):
            return value
        raise _mismatch(proto, value, field)

    if isinstance(proto, Decimal):
        return _to_decimal(proto, value, field)

    if isinstance(proto, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
            return int(value)
        raise _mismatch(proto, value, field)

    if isinstance(proto, float):
        if _is_number(value):
            return float(value)
        raise _mismatch(proto, value, field)

    if isinstance(proto, str):
        if isinstance(value, str):
            return value
        raise _mismatch(proto, value, field)

    # datetime is a date, so check it first
    if isinstance(proto, datetime):
        if isinstance(value, datetime):
            return value
        raise _mismatch(proto, value, field)
    if isinstance(proto, date):
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        raise _mismatch(proto, value, field)

    if isinstance(value, type(proto)):
        return value
    raise _mismatch(proto, value, field)


def assign_map(
    type_proto: Mapping[str, Any],
    current: Mapping[str, Any],
    values: Mapping[str, Any],
) -> dict[str, Any]:
    """Merge ``values`` into ``current``, typing each through ``type_proto``.

    Keys of ``values`` absent from ``type_proto`` are ignored.
    """
    result = dict(current)
    for name, value in values.items():
        if name in type_proto:
            result[name] = assign_value(type_proto[name], value, field=name)
    return result
