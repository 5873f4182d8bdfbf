"""Instance model: an entity's field values tagged with their definition."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from entitycore.core.schema.models import EntityDef
from entitycore.core.typed import assign_map
from entitycore.core.types import PRIMARY

if TYPE_CHECKING:
    from entitycore.core.keys.models import KeyValue


@dataclass(frozen=True, slots=True, eq=False)
class Instance(Mapping[str, Any]):
    """Read-only field values of one entity instance.

    Owned by whoever created or read it; the registry never holds instances.
    ``key`` names the key the instance was read with, if any. Two instances
    are equal when they are of the same entity with equal field values.
    """

    entity: EntityDef
    data: Mapping[str, Any]
    key: str | None = None

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Instance):
            return self.entity.name == other.entity.name and dict(self.data) == dict(other.data)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Instance({self.entity.name} {dict(self.data)!r})"

    @property
    def entity_name(self) -> str:
        return self.entity.name

    @property
    def primary(self) -> KeyValue:
        """Primary key value built from this instance's fields."""
        # Late import to avoid circular dependency
        from entitycore.core.keys import make_key

        return make_key(self.entity, PRIMARY, self)

    def assign(self, **changes: Any) -> Instance:
        """Return a copy with fields changed, typed through the entity's field types.

        Unknown field names are ignored.
        """
        data = assign_map(self.entity.type_prototype, self.data, changes)
        return Instance(entity=self.entity, data=MappingProxyType(data), key=self.key)

    def as_dict(self) -> dict[str, Any]:
        return dict(self.data)
