"""
Shared request validators
"""

from pydantic import field_validator


def _not_null(value):
    if value is None:
        raise ValueError("may be omitted but not set to null")
    return value


def reject_null(*fields: str):
    """
    Refuse an explicit null for fields the stored record requires

    Partial-update models declare these fields Optional so they can be left
    out; leaving them out is fine, sending null is not.
    """
    return field_validator(*fields, mode="before")(_not_null)
