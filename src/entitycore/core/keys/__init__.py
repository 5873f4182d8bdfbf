"""Key resolution and key values."""

from entitycore.core.keys.core import (
    get_key_info,
    is_key_value,
    key_prototype,
    make_key,
    resolve_key_fields,
)
from entitycore.core.keys.models import KeyValue

__all__ = [
    "KeyValue",
    "get_key_info",
    "resolve_key_fields",
    "key_prototype",
    "make_key",
    "is_key_value",
]
