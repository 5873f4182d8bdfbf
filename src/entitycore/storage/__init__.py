"""Storage: gateway protocol, bundled gateways and instance I/O."""

from entitycore.storage.local import LocalGateway, QueryFn
from entitycore.storage.null import NULL_GATEWAY, NullGateway
from entitycore.storage.operations import (
    delete_instance,
    gateway_for,
    read_entity,
    write_instance,
)
from entitycore.storage.protocol import Gateway, ReadResult

__all__ = [
    "Gateway",
    "ReadResult",
    "NullGateway",
    "NULL_GATEWAY",
    "LocalGateway",
    "QueryFn",
    "gateway_for",
    "read_entity",
    "write_instance",
    "delete_instance",
]
