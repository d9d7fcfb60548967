"""
Base model for Workforce Risk.

Wire format is camelCase (the caller interface and the LLM JSON shape),
Python attributes stay snake_case.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Pydantic model serialised with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump as JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from the workforce service.

    Accepts date/datetime objects and ISO strings of the form
    YYYY-MM-DD[...], YYYY-MM or YYYY. Anything else yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) >= 10:
            return date.fromisoformat(text[:10])
        if len(text) == 7:
            return date(int(text[:4]), int(text[5:7]), 1)
        if len(text) == 4:
            return date(int(text), 1, 1)
    except ValueError:
        return None
    return None
