"""
Placeholder value validation and inline formatting, one routine per kind.
"""
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence, Union

from config import settings
from .models import PlaceholderKind

Number = Union[int, float, Decimal]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def parse_date(value: Any) -> Union[date, datetime]:
    """Accept date/datetime objects or ISO-8601 strings"""
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected ISO-8601 string, got {type(value).__name__}")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    # Date-times, with Z or offsets
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def parse_number(value: Any) -> Number:
    """Accept real numbers or numeric strings; booleans and non-finite values are rejected"""
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, (int, Decimal)):
        number = value
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = Decimal(text)
            except InvalidOperation:
                raise ValueError(f"not a number: {value!r}") from None
    else:
        raise TypeError(f"expected number, got {type(value).__name__}")

    if isinstance(number, float) and not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    if isinstance(number, Decimal) and not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


class ValueFormatter:
    """
    Turns typed field values into inline text.

    Raises TypeError/ValueError when a value does not fit its declared kind;
    the renderer reports those with the section and placeholder names.
    """

    def __init__(
        self,
        date_format: Optional[str] = None,
        list_separator: Optional[str] = None,
        row_separator: Optional[str] = None,
        cell_separator: Optional[str] = None
    ):
        self.date_format = date_format or settings.DATE_FORMAT
        self.list_separator = list_separator if list_separator is not None else settings.LIST_SEPARATOR
        self.row_separator = row_separator if row_separator is not None else settings.TABLE_ROW_SEPARATOR
        self.cell_separator = cell_separator if cell_separator is not None else settings.TABLE_CELL_SEPARATOR

    def format(self, kind: PlaceholderKind, value: Any) -> str:
        if kind == PlaceholderKind.DATE:
            return self.format_date(value)
        if kind == PlaceholderKind.NUMBER:
            return self.format_number(value)
        if kind == PlaceholderKind.LIST:
            return self.format_list(value)
        if kind == PlaceholderKind.TABLE:
            return self.format_table(value)
        return self.format_text(value)

    def format_text(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (Mapping, bytes, bytearray)) or _is_sequence(value):
            raise TypeError(f"expected text, got {type(value).__name__}")
        return str(value)

    def format_date(self, value: Any) -> str:
        return parse_date(value).strftime(self.date_format)

    def format_number(self, value: Any) -> str:
        number = parse_number(value)
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        if isinstance(number, Decimal):
            # 12.50 -> 12.5, 1E+3 -> 1000
            return format(number.normalize(), "f")
        return str(number)

    def format_list(self, value: Any) -> str:
        if not _is_sequence(value):
            raise TypeError(f"expected a sequence of items, got {type(value).__name__}")
        return self.list_separator.join(self._cell(item) for item in value)

    def format_table(self, value: Any) -> str:
        if not _is_sequence(value):
            raise TypeError(f"expected a sequence of rows, got {type(value).__name__}")

        rows = []
        for row in value:
            if isinstance(row, Mapping):
                cells = list(row.values())
            elif _is_sequence(row):
                cells = list(row)
            else:
                raise TypeError(f"expected a row sequence, got {type(row).__name__}")
            rows.append(self.cell_separator.join(self._cell(cell) for cell in cells))
        return self.row_separator.join(rows)

    def _cell(self, item: Any) -> str:
        if item is None:
            return ""
        if isinstance(item, (date, datetime)):
            return item.strftime(self.date_format)
        if isinstance(item, (Mapping, bytes, bytearray)) or _is_sequence(item):
            raise TypeError(f"nested {type(item).__name__} is not allowed here")
        return str(item)
