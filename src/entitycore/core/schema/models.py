"""Schema models: scalars, enums, fields, keys and entity definitions.

These are the declarations a schema loader hands to the TypeRegistry. The
registry validates them and fills in the resolved prototypes of an EntityDef.

Usage:
    EntityDef(
        name="foo/FruitSupplier",
        fields=[
            FieldDef("Fruit", ref("foo/StringId")),
            FieldDef("Supplier", ref("foo/StringId")),
            FieldDef("PricePerKg", ref("foo/Money")),
        ],
        primary=["Fruit", "Supplier"],
        keys={
            "by-fruit": KeyDef("by-fruit", ["Fruit"]),
            "filter": KeyDef("filter", [
                "Fruit",
                key_field("foo/Fruit.Active", as_="FruitActive"),
            ]),
        },
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from entitycore.config import EntitySettings, default_settings
from entitycore.core.types import PRIMARY, UNSET, TypeSpec
from entitycore.errors import InvalidDeclaration

if TYPE_CHECKING:
    from entitycore.storage.protocol import Gateway


@dataclass(frozen=True, slots=True)
class ScalarType:
    """A named primitive type whose exemplar conveys its shape."""

    name: str
    exemplar: Any


@dataclass(frozen=True, slots=True)
class EnumType:
    """Symbolic tags mapped to underlying values, one tag being the default."""

    name: str
    mapping: Mapping[str, Any]
    default: str

    @property
    def default_value(self) -> Any:
        return self.mapping[self.default]

    def tag_for(self, value: Any) -> str | None:
        """Reverse lookup of the first tag mapped to ``value``."""
        for tag, mapped in self.mapping.items():
            if mapped == value:
                return tag
        return None


@dataclass(frozen=True, slots=True)
class FieldDef:
    """An entity field: its type and an optional default overriding the type's exemplar."""

    name: str
    type: TypeSpec
    default: TypeSpec = UNSET


@dataclass(frozen=True, slots=True)
class KeyField:
    """One field of a key.

    ``entity`` is None for a field of the key's own entity, otherwise the
    name of the entity whose ``field`` types this key field. ``name`` is the
    field's name within key values, which differs from ``field`` when renamed.
    """

    name: str
    field: str
    entity: str | None = None
    default: Any = None

    @property
    def is_local(self) -> bool:
        return self.entity is None


def key_field(
    reference: str,
    *,
    as_: str | None = None,
    default: Any = None,
    settings: EntitySettings | None = None,
) -> KeyField:
    """Parse a key field reference.

    ``"Fruit"`` is a local field; ``"foo/Fruit.Active"`` is the ``Active``
    field of entity ``foo/Fruit``.

    Args:
        reference: Local field name or ``ns/Type.Field`` reference.
        as_: Name of the field within key values.
        default: Value the field takes when none is supplied.
        settings: Separators to parse with. Defaults to environment settings.

    Returns:
        The parsed KeyField.

    Raises:
        InvalidDeclaration: If the reference is malformed.
    """
    settings = settings or default_settings()
    ns_sep = settings.namespace_separator
    ref_sep = settings.reference_separator

    if ns_sep in reference:
        namespace, _, rest = reference.partition(ns_sep)
        type_name, sep, field_name = rest.partition(ref_sep)
        if not (namespace and type_name and sep and field_name):
            raise InvalidDeclaration(
                f"Field reference must be in the form ns{ns_sep}Type{ref_sep}Field",
                reference=reference,
            )
        entity: str | None = f"{namespace}{ns_sep}{type_name}"
    else:
        if ref_sep in reference:
            raise InvalidDeclaration(
                "Field reference must be namespace qualified", reference=reference
            )
        if not reference:
            raise InvalidDeclaration("Field reference cannot be empty", reference=reference)
        entity = None
        field_name = reference

    return KeyField(name=as_ or field_name, field=field_name, entity=entity, default=default)


@dataclass(slots=True)
class KeyDef:
    """A named lookup over an entity.

    Fields may be given as KeyField instances or as reference strings
    understood by ``key_field``. Strings are parsed when the owning entity is
    registered, with the registry's separators. The typed prototype is filled
    in lazily by the key resolver and kept once resolution succeeds.
    """

    name: str
    fields: list[KeyField | str] = field(default_factory=list)
    unique: bool = False
    cached: bool = False
    typed_prototype: Mapping[str, Any] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.fields = list(self.fields)

    def parse_fields(self, settings: EntitySettings | None = None) -> None:
        """Parse reference strings into KeyFields.

        Raises:
            InvalidDeclaration: If a reference is malformed or two fields share a name.
        """
        parsed = [
            f if isinstance(f, KeyField) else key_field(f, settings=settings) for f in self.fields
        ]
        names = [f.name for f in parsed]
        if len(set(names)) != len(names):
            raise InvalidDeclaration("Duplicate key field name", key=self.name, fields=names)
        self.fields = list(parsed)

    @property
    def key_fields(self) -> list[KeyField]:
        if not all(isinstance(f, KeyField) for f in self.fields):
            self.parse_fields()
        return self.fields  # type: ignore[return-value]

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.key_fields]

    def defaults(self) -> dict[str, Any]:
        """Key field names mapped to their declared defaults, in declaration order."""
        return {f.name: f.default for f in self.key_fields}


Hook = Callable[..., Any]


@dataclass(slots=True)
class EntityDef:
    """Declaration of an entity type.

    After registration ``prototype`` holds each field's default value and
    ``type_prototype`` each field's resolved type value. ``keys`` then also
    contains the implicit ``primary`` key. Lifecycle hooks are stored only.
    """

    name: str
    fields: list[FieldDef]
    primary: list[str]
    keys: dict[str, KeyDef] = field(default_factory=dict)
    alias: str | None = None
    gateway: Gateway | None = None
    create: Hook | None = None
    mutate: Hook | None = None
    join: Hook | None = None
    destroy: Hook | None = None
    prototype: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    type_prototype: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    local_name: str | None = field(default=None, init=False, repr=False)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def unqualified_name(self) -> str:
        """Name without its namespace, as split by the registry that defined it."""
        if self.local_name is not None:
            return self.local_name
        return self.name.rsplit(default_settings().namespace_separator, 1)[-1]

    @property
    def alias_name(self) -> str:
        """Map key under which instances of this entity are placed by default."""
        return self.alias or self.unqualified_name

    @property
    def primary_key(self) -> KeyDef:
        return self.keys[PRIMARY]

    def hooks(self) -> dict[str, Hook]:
        """Lifecycle hooks that were declared, by name."""
        declared = {
            "create": self.create,
            "mutate": self.mutate,
            "join": self.join,
            "destroy": self.destroy,
        }
        return {name: hook for name, hook in declared.items() if hook is not None}
