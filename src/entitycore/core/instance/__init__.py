"""Entity instances."""

from entitycore.core.instance.core import get_alias, get_primary_key, is_instance, new_instance
from entitycore.core.instance.models import Instance

__all__ = [
    "Instance",
    "new_instance",
    "get_alias",
    "get_primary_key",
    "is_instance",
]
