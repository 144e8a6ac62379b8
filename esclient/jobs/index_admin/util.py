"""Utilities for the index_admin commands"""

from typing import Iterable


def parse_fields(fields: Iterable[str]) -> dict[str, str]:
    """Turn `name:type` declarations into a field mapping.

    Raises ValueError on a declaration without a type.
    """
    mapping: dict[str, str] = {}
    for field in fields:
        name, sep, field_type = field.partition(":")
        if not sep or not name or not field_type:
            raise ValueError(f"Invalid field declaration: {field!r}, expected name:type")
        mapping[name] = field_type
    return mapping
