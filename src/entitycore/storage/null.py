"""Gateway for entities without a physical store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from entitycore.storage.protocol import ReadResult

if TYPE_CHECKING:
    from entitycore.core.instance import Instance
    from entitycore.core.keys import KeyValue


class NullGateway:
    """I/O that does nothing: reads find nothing, writes affect nothing."""

    def read_by_key(self, key_name: str, key_value: KeyValue) -> ReadResult:
        return None

    def write(self, instance: Instance) -> int:
        return 0

    def delete(self, instance: Instance) -> int:
        return 0


NULL_GATEWAY = NullGateway()
