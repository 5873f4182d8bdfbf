"""Fruit shop: define a small schema, store some rows, build a graph.

Run from the repository root:
    python examples/fruit_shop.py
"""

import logging
from decimal import Decimal

from entitycore import (
    EACH,
    EntityDef,
    FieldDef,
    KeyDef,
    LocalGateway,
    MergePolicy,
    aggregate,
    get_registry,
    make_key,
    new_instance,
    ref,
    write_instance,
)


def define_schema() -> None:
    registry = get_registry()
    registry.define_scalar("shop/Name", "")
    registry.define_scalar("shop/Money", Decimal("0.00"))
    registry.define_enum("shop/Active", {"y": 1, "n": 0}, "y")

    offers = LocalGateway()
    suppliers = LocalGateway()
    suppliers.register_query(
        "by-fruit",
        lambda rows, key: [
            row
            for row in rows
            if any(o["Fruit"] == key["Fruit"] and o["Supplier"] == row["Supplier"] for o in offers)
        ],
    )

    registry.define_entity(
        EntityDef(
            name="shop/Fruit",
            fields=[FieldDef("Fruit", ref("shop/Name")), FieldDef("Active", ref("shop/Active"))],
            primary=["Fruit"],
            keys={"by-active": KeyDef("by-active", ["Active"])},
            gateway=LocalGateway(),
        )
    )
    registry.define_entity(
        EntityDef(
            name="shop/Offer",
            fields=[
                FieldDef("Fruit", ref("shop/Name")),
                FieldDef("Supplier", ref("shop/Name")),
                FieldDef("PricePerKg", ref("shop/Money")),
            ],
            primary=["Fruit", "Supplier"],
            gateway=offers,
        )
    )
    registry.define_entity(
        EntityDef(
            name="shop/Supplier",
            fields=[FieldDef("Supplier", ref("shop/Name")), FieldDef("Town", ref("shop/Name"))],
            primary=["Supplier"],
            keys={"by-fruit": KeyDef("by-fruit", ["shop/Fruit.Fruit"])},
            gateway=suppliers,
        )
    )


def stock() -> None:
    for name, active in [("Strawberry", 1), ("Banana", 1), ("Pineapple", 0)]:
        write_instance(new_instance("shop/Fruit", {"Fruit": name, "Active": active}))
    for name, town in [("Kent Fruits", "Canterbury"), ("Sussex Fruits", "Lewes")]:
        write_instance(new_instance("shop/Supplier", {"Supplier": name, "Town": town}))
    for fruit, supplier, price in [
        ("Strawberry", "Kent Fruits", 2.75),
        ("Strawberry", "Sussex Fruits", 2.79),
        ("Pineapple", "Sussex Fruits", 3.49),
    ]:
        write_instance(
            new_instance("shop/Offer", {"Fruit": fruit, "Supplier": supplier, "PricePerKg": price})
        )


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    define_schema()
    stock()

    # Active fruits first, then add the inactive ones without losing them
    active = make_key("shop/Fruit", "by-active", {"Active": 1})
    graph = aggregate({}, to="shop/Fruit", key_val=active, set_name="fruits")
    graph = aggregate(
        graph,
        to="shop/Fruit",
        key_val=("by-active", {"Active": 0}),
        set_name="fruits",
        merge=MergePolicy.PRIMARY_KEY,
    )
    graph = aggregate(
        graph,
        to="shop/Supplier",
        from_=["fruits", EACH, "Fruit"],
        key_val="by-fruit",
        set_name="suppliers",
        must_join=True,
    )

    for element in graph["fruits"]:
        towns = ", ".join(s["Supplier"]["Town"] for s in element["suppliers"])
        print(f"{element['Fruit']['Fruit']}: supplied from {towns}")


if __name__ == "__main__":
    main()
