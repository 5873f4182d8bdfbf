"""End-to-end aggregation over the fruit and supplier schema.

Builds graphs the way an application would: seed from a key, then walk
outwards through suppliers, fruits and nutrition.
"""

import copy

from entitycore import EACH, MergePolicy, aggregate, make_key


def fruit_names(elements):
    return [e["Fruit"]["Fruit"] for e in elements]


def test_suppliers_of_a_fruit(stocked_db):
    graph = {"Fruit": stocked_db.strawberry}

    graph = aggregate(
        graph,
        to="foo/Supplier",
        from_=["Fruit"],
        key_val="by-fruit",
        instance_name="Supplier",
        set_name="suppliers",
    )

    assert graph == {
        "Fruit": stocked_db.strawberry,
        "suppliers": [{"Supplier": stocked_db.kent_fruits}, {"Supplier": stocked_db.sussex_fruits}],
    }


def test_fruits_of_each_supplier_with_nutrition(stocked_db):
    """Three joins deep: fruit -> suppliers -> their fruits -> nutrition."""
    graph = aggregate({}, to="foo/Fruit", key_val={"Fruit": "Strawberry"})
    graph = aggregate(
        graph, to="foo/Supplier", from_=["Fruit"], key_val="by-fruit", set_name="suppliers"
    )
    graph = aggregate(
        graph,
        to="foo/Fruit",
        from_=["suppliers", EACH, "Supplier"],
        key_val="by-supplier",
        set_name="fruits",
    )
    graph = aggregate(
        graph, to="foo/Nutrition", from_=["suppliers", ">", "fruits", ">", "Fruit"]
    )

    kent, sussex = graph["suppliers"]
    assert fruit_names(kent["fruits"]) == ["Strawberry"]
    assert fruit_names(sussex["fruits"]) == ["Strawberry", "Pineapple"]
    assert [e["Nutrition"]["KCalPer100g"] for e in sussex["fruits"]] == [40, 45]


def test_must_join_drops_fruit_without_nutrition(fruit_db):
    fruit_db.write_fruits()
    fruit_db.write_nutrition(fruit_db.strawberry_nutrition, fruit_db.banana_nutrition)

    graph = aggregate(
        {}, to="foo/Fruit", key_val=make_key("foo/Fruit", "filter", {}), set_name="fruits"
    )
    assert fruit_names(graph["fruits"]) == ["Strawberry", "Banana", "Pineapple"]

    joined = aggregate(graph, to="foo/Nutrition", from_=["fruits", EACH, "Fruit"], must_join=True)
    assert fruit_names(joined["fruits"]) == ["Strawberry", "Banana"]
    assert joined["fruits"][1]["Nutrition"] == fruit_db.banana_nutrition

    optional = aggregate(graph, to="foo/Nutrition", from_=["fruits", EACH, "Fruit"])
    assert fruit_names(optional["fruits"]) == ["Strawberry", "Banana", "Pineapple"]
    assert optional["fruits"][2]["Nutrition"] is None


def test_must_join_drops_fruit_without_suppliers(stocked_db):
    graph = aggregate({}, to="foo/Fruit", key_val=("all", {}), set_name="fruits")

    graph = aggregate(
        graph,
        to="foo/Supplier",
        from_=["fruits", EACH, "Fruit"],
        key_val="by-fruit",
        set_name="suppliers",
        must_join=True,
    )

    assert fruit_names(graph["fruits"]) == ["Strawberry", "Pineapple"]
    assert [len(e["suppliers"]) for e in graph["fruits"]] == [2, 1]


def test_must_join_at_root_keeps_the_root(stocked_db):
    graph = aggregate({}, to="foo/Fruit", key_val={"Fruit": "Kiwi"}, must_join=True)

    assert graph == {"Fruit": None}


def test_merge_by_primary_key(stocked_db):
    inactive = make_key("foo/Fruit", "filter", {"FruitActive": 0})
    active = make_key("foo/Fruit", "filter", {"FruitActive": 1})
    graph = aggregate({}, to="foo/Fruit", key_val=inactive, set_name="fruits")
    assert fruit_names(graph["fruits"]) == ["Pineapple"]

    merged = aggregate(
        graph, to="foo/Fruit", key_val=active, set_name="fruits", merge=MergePolicy.PRIMARY_KEY
    )
    replaced = aggregate(graph, to="foo/Fruit", key_val=active, set_name="fruits")

    assert fruit_names(merged["fruits"]) == ["Pineapple", "Strawberry", "Banana"]
    assert fruit_names(replaced["fruits"]) == ["Strawberry", "Banana"]


def test_for_each_runs_once_per_written_element(fruit_db):
    """Elements dropped by must_join are never handed to for_each."""
    fruit_db.write_fruits()
    fruit_db.write_nutrition(fruit_db.strawberry_nutrition, fruit_db.banana_nutrition)
    graph = aggregate({}, to="foo/Fruit", key_val=("all", {}), set_name="fruits")

    def recorder(calls):
        def record(node):
            calls.append(node["Fruit"]["Fruit"])
            return {**node, "visited": len(calls)}

        return record

    optional_calls, required_calls = [], []
    optional = aggregate(
        graph,
        to="foo/Nutrition",
        from_=["fruits", EACH, "Fruit"],
        for_each=recorder(optional_calls),
    )
    required = aggregate(
        graph,
        to="foo/Nutrition",
        from_=["fruits", EACH, "Fruit"],
        must_join=True,
        for_each=recorder(required_calls),
    )

    assert optional_calls == ["Strawberry", "Banana", "Pineapple"]
    assert [e["visited"] for e in optional["fruits"]] == [1, 2, 3]
    assert required_calls == ["Strawberry", "Banana"]
    assert [e["visited"] for e in required["fruits"]] == [1, 2]


def test_for_each_rewrites_joined_elements(stocked_db):
    graph = aggregate({}, to="foo/Fruit", key_val=("all", {}), set_name="fruits")

    graph = aggregate(
        graph,
        to="foo/Nutrition",
        from_=["fruits", EACH, "Fruit"],
        for_each=lambda node: {**node, "kcal": node["Nutrition"]["KCalPer100g"]},
    )

    assert [e["kcal"] for e in graph["fruits"]] == [40, 50, 45]


def test_for_each_at_root_gets_written_value(stocked_db):
    graph = aggregate(
        {},
        to="foo/Fruit",
        key_val=("all", {}),
        set_name="fruits",
        for_each=lambda fruits: fruits[:2],
    )
    graph = aggregate(
        graph,
        to="foo/Nutrition",
        key_val={"Fruit": "Banana"},
        for_each=lambda nutrition: nutrition["KCalPer100g"],
    )

    assert fruit_names(graph["fruits"]) == ["Strawberry", "Banana"]
    assert graph["Nutrition"] == 50


def test_building_a_graph_leaves_earlier_graphs_untouched(stocked_db):
    seed = aggregate({}, to="foo/Fruit", key_val=("all", {}), set_name="fruits")
    before = copy.copy(seed["fruits"])

    aggregate(seed, to="foo/Nutrition", from_=["fruits", EACH, "Fruit"], must_join=True)

    assert seed["fruits"] == before
    assert all(set(e) == {"Fruit"} for e in seed["fruits"])
