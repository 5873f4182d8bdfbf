"""Shared test fixtures: a fruit and supplier schema over in-memory gateways."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from entitycore import (
    EntityDef,
    FieldDef,
    Instance,
    KeyDef,
    LocalGateway,
    TypeRegistry,
    key_field,
    new_instance,
    ref,
    reset_registry,
    write_instance,
)

EPOCH = datetime(1970, 1, 1)


@dataclass
class FruitDb:
    """Gateways of the fruit schema plus the instances tests write to them."""

    registry: TypeRegistry
    fruit_store: LocalGateway
    nutrition_store: LocalGateway
    fruit_supplier_store: LocalGateway
    supplier_store: LocalGateway
    strawberry: Instance
    banana: Instance
    pineapple: Instance
    strawberry_nutrition: Instance
    banana_nutrition: Instance
    pineapple_nutrition: Instance
    strawberries_from_kent: Instance
    strawberries_from_sussex: Instance
    pineapples_from_sussex: Instance
    kent_fruits: Instance
    sussex_fruits: Instance

    def write_fruits(self) -> None:
        for instance in (self.strawberry, self.banana, self.pineapple):
            write_instance(instance)

    def write_nutrition(self, *instances: Instance) -> None:
        for instance in instances or (
            self.strawberry_nutrition,
            self.banana_nutrition,
            self.pineapple_nutrition,
        ):
            write_instance(instance)

    def write_suppliers(self) -> None:
        for instance in (
            self.kent_fruits,
            self.sussex_fruits,
            self.strawberries_from_kent,
            self.strawberries_from_sussex,
            self.pineapples_from_sussex,
        ):
            write_instance(instance)


def define_scalars(registry: TypeRegistry) -> None:
    registry.define_scalar("foo/StringId", "")
    registry.define_scalar("foo/NumDays", 0)
    registry.define_scalar("foo/LongVal", 0)
    registry.define_scalar("foo/LongName", "")
    registry.define_scalar("foo/Money", Decimal("0.00"))
    registry.define_scalar("foo/DateTime", EPOCH)
    registry.define_scalar("foo/AddressLine", "")
    registry.define_enum("foo/Freezable", {"y": "Y", "n": "N"}, "y")
    registry.define_enum("foo/Active", {"y": 1, "n": 0}, "y")


def define_fruit_schema(registry: TypeRegistry) -> tuple[LocalGateway, ...]:
    """Define Fruit, Nutrition, FruitSupplier and Supplier. Returns their gateways."""
    fruit_store = LocalGateway()
    nutrition_store = LocalGateway()
    fruit_supplier_store = LocalGateway()
    supplier_store = LocalGateway()

    def fruits_by_supplier(rows, key):
        supplied = {
            fs["Fruit"] for fs in fruit_supplier_store.rows() if fs["Supplier"] == key["Supplier"]
        }
        return [row for row in rows if row["Fruit"] in supplied]

    def filter_fruit(rows, key):
        def matches(row):
            return (
                (key["Fruit"] is None or row["Fruit"] == key["Fruit"])
                and (key["FruitActive"] is None or row["Active"] == key["FruitActive"])
                and (key["Freezable"] is None or row["Freezable"] == key["Freezable"])
                and (key["MinShelfLife"] is None or row["ShelfLife"] >= key["MinShelfLife"])
                and (key["MaxShelfLife"] is None or row["ShelfLife"] <= key["MaxShelfLife"])
            )

        return [row for row in rows if matches(row)]

    def suppliers_by_fruit(rows, key):
        by_name = {row["Supplier"]: row for row in rows}
        return [
            by_name[fs["Supplier"]]
            for fs in fruit_supplier_store.rows()
            if fs["Fruit"] == key["Fruit"] and fs["Supplier"] in by_name
        ]

    fruit_store.register_query("by-supplier", fruits_by_supplier)
    fruit_store.register_query("filter", filter_fruit)
    supplier_store.register_query("by-fruit", suppliers_by_fruit)

    registry.define_entity(
        EntityDef(
            name="foo/Fruit",
            fields=[
                FieldDef("Fruit", ref("foo/StringId")),
                FieldDef("Description", ref("foo/LongName")),
                FieldDef("ShelfLife", ref("foo/NumDays"), default=1),
                FieldDef("Active", ref("foo/Active")),
                FieldDef("Freezable", ref("foo/Freezable"), default="N"),
            ],
            primary=["Fruit"],
            keys={
                "all": KeyDef("all", []),
                "by-active": KeyDef("by-active", ["Active"], cached=True),
                "by-supplier": KeyDef("by-supplier", ["foo/Supplier.Supplier"]),
                "filter": KeyDef(
                    "filter",
                    [
                        "Fruit",
                        key_field("Active", as_="FruitActive"),
                        "Freezable",
                        key_field("ShelfLife", as_="MinShelfLife", default=7),
                        key_field("ShelfLife", as_="MaxShelfLife"),
                    ],
                ),
            },
            gateway=fruit_store,
            create=lambda instance: instance,
            alias="Fruit",
        )
    )
    registry.define_entity(
        EntityDef(
            name="foo/Nutrition",
            fields=[
                FieldDef("Fruit", ref("foo/StringId")),
                FieldDef("KCalPer100g", ref("foo/LongVal")),
                FieldDef("Fat", ref("foo/LongVal")),
                FieldDef("Salt", ref("foo/LongVal")),
            ],
            primary=["Fruit"],
            gateway=nutrition_store,
            alias="Nutrition",
        )
    )
    registry.define_entity(
        EntityDef(
            name="foo/FruitSupplier",
            fields=[
                FieldDef("Fruit", ref("foo/StringId")),
                FieldDef("Supplier", ref("foo/StringId")),
                FieldDef("PricePerKg", ref("foo/Money")),
                FieldDef("LastOrdered", EPOCH),
            ],
            primary=["Fruit", "Supplier"],
            keys={
                "by-fruit": KeyDef("by-fruit", ["Fruit"], cached=True),
                "filter": KeyDef(
                    "filter",
                    [
                        "Fruit",
                        "Supplier",
                        key_field("foo/Fruit.Active", as_="FruitActive"),
                        key_field("foo/Supplier.Active", as_="SupplierActive"),
                        key_field("LastOrdered", as_="FromDate"),
                        key_field("LastOrdered", as_="ToDate"),
                        "foo/Fruit.Freezable",
                        key_field("foo/Fruit.ShelfLife", as_="MinShelfLife"),
                        key_field("foo/Fruit.ShelfLife", as_="MaxShelfLife"),
                    ],
                ),
                "all": KeyDef("all", []),
            },
            gateway=fruit_supplier_store,
        )
    )
    registry.define_entity(
        EntityDef(
            name="foo/Supplier",
            fields=[
                FieldDef("Supplier", ref("foo/StringId")),
                FieldDef("Active", ref("foo/Active")),
                FieldDef("Address1", ref("foo/AddressLine")),
                FieldDef("Address2", ref("foo/AddressLine")),
            ],
            primary=["Supplier"],
            keys={
                "by-fruit": KeyDef("by-fruit", ["foo/Fruit.Fruit"]),
                "all": KeyDef("all", []),
            },
            gateway=supplier_store,
        )
    )
    return fruit_store, nutrition_store, fruit_supplier_store, supplier_store


@pytest.fixture
def registry():
    """Fresh global registry, replaced again after the test."""
    registry = reset_registry()
    yield registry
    reset_registry()


@pytest.fixture
def scalar_registry(registry):
    """Registry holding the fruit scalars and enums only."""
    define_scalars(registry)
    return registry


@pytest.fixture
def fruit_db(scalar_registry) -> FruitDb:
    """Fruit schema with empty gateways and the test instances."""
    stores = define_fruit_schema(scalar_registry)

    def fruit(name, description, shelf_life, active, freezable):
        return new_instance(
            "foo/Fruit",
            {
                "Fruit": name,
                "Description": description,
                "ShelfLife": shelf_life,
                "Active": scalar_registry.enum_value("foo/Active", active),
                "Freezable": scalar_registry.enum_value("foo/Freezable", freezable),
            },
        )

    def nutrition(name, kcal, fat, salt):
        return new_instance(
            "foo/Nutrition", {"Fruit": name, "KCalPer100g": kcal, "Fat": fat, "Salt": salt}
        )

    def fruit_supplier(name, supplier, price, ordered):
        return new_instance(
            "foo/FruitSupplier",
            {"Fruit": name, "Supplier": supplier, "PricePerKg": price, "LastOrdered": ordered},
        )

    def supplier(name, address1, address2):
        return new_instance(
            "foo/Supplier",
            {"Supplier": name, "Active": 1, "Address1": address1, "Address2": address2},
        )

    return FruitDb(
        scalar_registry,
        *stores,
        strawberry=fruit("Strawberry", "Soft Summer Fruit", 14, "y", "y"),
        banana=fruit("Banana", "Yellow and not straight", 21, "y", "n"),
        pineapple=fruit("Pineapple", "Edible Bromeliad", 46, "n", "n"),
        strawberry_nutrition=nutrition("Strawberry", 40, 0, 0),
        banana_nutrition=nutrition("Banana", 50, 1, 0),
        pineapple_nutrition=nutrition("Pineapple", 45, 0, 1),
        strawberries_from_kent=fruit_supplier(
            "Strawberry", "Kent Fruits", Decimal("2.75"), datetime(2017, 6, 2, 12, 3, 42)
        ),
        strawberries_from_sussex=fruit_supplier(
            "Strawberry", "Sussex Fruits", Decimal("2.79"), datetime(2017, 6, 2, 13, 7, 31)
        ),
        pineapples_from_sussex=fruit_supplier(
            "Pineapple", "Sussex Fruits", Decimal("3.49"), datetime(2017, 6, 1, 23, 7, 31)
        ),
        kent_fruits=supplier("Kent Fruits", "The Fruit Farm", "Deepest Kent"),
        sussex_fruits=supplier("Sussex Fruits", "All Fruits", "South Downs"),
    )


@pytest.fixture
def stocked_db(fruit_db) -> FruitDb:
    """Fruit schema with every test instance written."""
    fruit_db.write_fruits()
    fruit_db.write_nutrition()
    fruit_db.write_suppliers()
    return fruit_db
