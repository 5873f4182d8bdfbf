"""Gateway protocol for swappable persistence bindings.

Each entity is bound to one gateway, which reads instances by key and
writes or deletes single instances. The gateway owns connections,
transactions, timeouts and the persisted layout; the core only calls it.

Usage:
    EntityDef(name="foo/Fruit", ..., gateway=LocalGateway())
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from entitycore.core.instance import Instance
    from entitycore.core.keys import KeyValue

ReadResult = Mapping[str, Any] | Sequence[Mapping[str, Any]] | None
"""What a gateway read returns: nothing, one row, or a sequence of rows."""


@runtime_checkable
class Gateway(Protocol):
    """Persistence binding for one entity. Implementations handle actual data."""

    def read_by_key(self, key_name: str, key_value: KeyValue) -> ReadResult:
        """Read the instance(s) matching a key value.

        Rows may be Instances or plain mappings of field values; the caller
        turns plain mappings into instances.
        """
        ...

    def write(self, instance: Instance) -> int:
        """Insert or replace an instance. Returns the affected count."""
        ...

    def delete(self, instance: Instance) -> int:
        """Delete an instance. Returns the affected count."""
        ...
