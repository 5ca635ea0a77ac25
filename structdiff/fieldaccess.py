"""
Field access for encapsulated record fields.

The walker reads public fields with getattr. Non-public fields (leading
underscore, pydantic private attributes) of allowlisted types are read through
a field reader: a callable ``reader(record, field) -> value`` where ``field``
is a typeinfo.RecordField. Callers may inject their own reader (for example to
unwrap proxies); ``read_field`` is the default.
"""

from typing import Any

from .typeinfo import RecordField


def read_field(record: Any, field: RecordField) -> Any:
    """Return the live value of a record field, bypassing attribute hooks."""
    private = getattr(record, '__pydantic_private__', None)
    if private and field.name in private:
        return private[field.name]
    return object.__getattribute__(record, field.name)
