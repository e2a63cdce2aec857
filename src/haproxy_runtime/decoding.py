"""
Positional row decoding shared by the runtime API table decoders.

A column schema is derived from a record model: the n-th declared field
is the n-th column, and the field annotation selects the parser. Empty
values decode to the zero value of their type; anything else that does
not parse is a FieldParseError.
"""

import re
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Any, Callable, Sequence, TypeVar

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .exceptions import FieldParseError

ModelT = TypeVar("ModelT", bound=BaseModel)

_INTEGER = re.compile(r"-?[0-9]+")
_I64_MIN = -(2 ** 63)
_I64_MAX = 2 ** 63 - 1
_U64_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class Column:
    """A fixed position in a runtime API table row."""
    index: int
    name: str
    parse: Callable[[str], Any]


def parse_integer(value: str, lo: int = _I64_MIN, hi: int = _I64_MAX) -> int:
    """Parse a decimal integer within [lo, hi]; an empty value is 0."""
    if value == "":
        return 0
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid integer {value!r}")
    number = int(value)
    if number < lo or number > hi:
        raise ValueError(f"{number} out of range [{lo}, {hi}]")
    return number


def parse_flag(value: str) -> bool:
    """Any non-zero integer is true."""
    return parse_integer(value) != 0


def _text(value: str) -> str:
    return value


def _bounds(info: FieldInfo) -> tuple[int, int]:
    lo, hi = _I64_MIN, _I64_MAX
    for constraint in info.metadata:
        if getattr(constraint, "ge", None) is not None:
            lo = constraint.ge
        if getattr(constraint, "le", None) is not None:
            hi = constraint.le
    return lo, hi


def _parser_for(name: str, info: FieldInfo) -> Callable[[str], Any]:
    annotation = info.annotation

    if annotation is str:
        return _text
    if annotation is bool:
        return parse_flag
    if isinstance(annotation, type) and issubclass(annotation, IntFlag):
        return lambda value: annotation(parse_integer(value, 0, _U64_MAX))
    if isinstance(annotation, type) and issubclass(annotation, IntEnum):
        return lambda value: annotation(parse_integer(value))
    if annotation is int:
        lo, hi = _bounds(info)
        return lambda value: parse_integer(value, lo, hi)

    raise TypeError(f"field {name} has no positional decoder for {annotation!r}")


def columns_for(model: type[BaseModel]) -> tuple[Column, ...]:
    """Build the positional column schema of a record model."""
    return tuple(
        Column(index=index, name=name, parse=_parser_for(name, info))
        for index, (name, info) in enumerate(model.model_fields.items())
    )


def decode_row(
    model: type[ModelT],
    columns: Sequence[Column],
    elements: Sequence[str],
    line: int,
) -> ModelT:
    """
    Map the elements of one row onto a record.

    Columns beyond the schema are ignored; fewer columns than the schema
    is a decode failure.

    Raises:
        FieldParseError: If the row is short or a field does not parse
    """
    if len(elements) < len(columns):
        raise FieldParseError(
            f"expected at least {len(columns)} fields, got {len(elements)}",
            line=line,
        )

    values = {}
    for column in columns:
        value = elements[column.index]
        try:
            values[column.name] = column.parse(value)
        except ValueError as e:
            raise FieldParseError(
                f"field {column.name} (column {column.index}): {e}",
                line=line,
                column=column.index,
                field=column.name,
                value=value,
            ) from e

    # Every value was checked by its column parser above
    return model.model_construct(**values)


def encode_value(value: Any) -> str:
    """Render a decoded value back to its wire representation."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(int(value))
    return str(value)


def encode_row(record: BaseModel, columns: Sequence[Column]) -> list[str]:
    """Render a record back to its positional wire fields."""
    return [encode_value(getattr(record, column.name)) for column in columns]
