"""
core/coerce.py -- Coercion for request fields.

Request bodies arrive from browsers that send numbers as either JSON numbers or
strings ("250"). These helpers turn both into Python numbers. Anything that is
not a finite number is rejected with InvalidInputError instead of being stored
as NaN. Integers headed for INTEGER columns must also fit in 64 bits.

Request fields are typed Any so that bad input reaches these helpers and
becomes a 400/401 rather than a framework 422; to_text() does the same job
for names.
"""

import math
from typing import Any, Optional, Union

from core.errors import InvalidInputError

Number = Union[int, float]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def to_number(value: Any, field: str = "value") -> Number:
    """Coerce a JSON value to a finite number.

    Integral values come back as int so 250 and "250" both serialize as 250.
    Integers stay exact; they only have to fit in a float.
    Booleans, None, empty strings and non-numeric text raise InvalidInputError.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field} must be a number")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidInputError(f"{field} must be a number")
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError as exc:
                raise InvalidInputError(f"{field} must be a number, got {text!r}") from exc
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError as exc:
            raise InvalidInputError(f"{field} must be a finite number") from exc
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidInputError(f"{field} must be a finite number")
        return int(value) if value.is_integer() else value
    raise InvalidInputError(f"{field} must be a number")


def to_integer(value: Any, field: str = "value") -> int:
    """Coerce a JSON value to an int that fits a signed 64-bit column.

    Fractional numbers and anything outside [-2**63, 2**63 - 1] are rejected.
    """
    number = to_number(value, field)
    if not isinstance(number, int):
        raise InvalidInputError(f"{field} must be a whole number")
    if not INT64_MIN <= number <= INT64_MAX:
        raise InvalidInputError(f"{field} is out of range")
    return number


def to_number_or_nan(value: Any) -> float:
    """Coerce a query parameter, mapping absent or unparseable values to NaN.

    NaN is the "no filter" marker for optional numeric filters such as maxPrice.
    """
    try:
        return float(to_number(value))
    except InvalidInputError:
        return math.nan


def to_text(value: Any, field: str = "value", max_length: Optional[int] = None) -> str:
    """Coerce a JSON value to stripped text; None becomes "".

    Non-strings, text longer than max_length, and strings that cannot be
    encoded as UTF-8 (JSON allows lone surrogates such as "\\ud800") raise
    InvalidInputError.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be a string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError(f"{field} is not valid UTF-8 text") from exc
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise InvalidInputError(f"{field} is longer than {max_length} characters")
    return value
