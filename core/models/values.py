"""Lenient value parsers shared by domain and external-shape models.

ERP back ends are inconsistent about scalar encodings: SAP returns dates as
``2024-01-15T00:00:00Z``, Oracle sends quantities as strings, synthetic data
uses plain Python values. These annotated types normalise all of them.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y%m%d")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lenient(parse: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """None and blank strings parse to None; everything else goes to ``parse``."""
    def validator(value):
        return None if _blank(value) else parse(value)
    return validator


def _numeric_text(value: str) -> str:
    # "1,250.00" -> "1250.00"
    return value.strip().replace(",", "")


def _to_decimal(value):
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse decimal: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(_numeric_text(value))
        except InvalidOperation:
            raise ValueError(f"Cannot parse decimal: {value!r}") from None
    return value


def _to_int(value):
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse integer: {value!r}")
    if isinstance(value, (float, Decimal)):
        return int(value)
    if isinstance(value, str):
        return int(float(_numeric_text(value)))
    return value


def _to_date(value):
    # datetime is a date subclass
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, str):
        return value

    text = value.strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            pass
    raise ValueError(f"Cannot parse date: {text}")


def _to_str(value):
    """Numeric identifiers (SAP DocEntry, Oracle ids) become strings."""
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


DecimalValue = Annotated[Optional[Decimal], BeforeValidator(_lenient(_to_decimal))]
IntValue = Annotated[Optional[int], BeforeValidator(_lenient(_to_int))]
DateValue = Annotated[Optional[date], BeforeValidator(_lenient(_to_date))]
StrValue = Annotated[Optional[str], BeforeValidator(_to_str)]
