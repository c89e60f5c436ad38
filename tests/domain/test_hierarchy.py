from __future__ import annotations

from catalogsync.domain.hierarchy import sequence_categories
from tests.helpers.catalog import make_category


def test_parent_precedes_children_regardless_of_input_order() -> None:
    categories = [
        make_category("3", parent="1"),
        make_category("1"),
        make_category("2", parent="1"),
    ]

    ordered = [item.category.code for item in sequence_categories(categories)]

    assert ordered.index("1") < ordered.index("2")
    assert ordered.index("1") < ordered.index("3")
    assert sorted(ordered) == ["1", "2", "3"]


def test_deep_chain_given_leaf_first() -> None:
    categories = [
        make_category("d", parent="c"),
        make_category("c", parent="b"),
        make_category("b", parent="a"),
        make_category("a"),
    ]

    ordered = [item.category.code for item in sequence_categories(categories)]

    assert ordered == ["a", "b", "c", "d"]


def test_orphan_is_kept_and_appended_detached() -> None:
    categories = [
        make_category("orphan", parent="missing"),
        make_category("root"),
        make_category("child", parent="root"),
    ]

    sequenced = sequence_categories(categories)

    assert [item.category.code for item in sequenced] == ["root", "child", "orphan"]
    orphan = sequenced[-1]
    assert orphan.detached
    assert orphan.parent_code is None
    assert not sequenced[1].detached
    assert sequenced[1].parent_code == "root"


def test_cycle_terminates_and_keeps_every_member() -> None:
    categories = [
        make_category("a", parent="b"),
        make_category("b", parent="a"),
        make_category("self", parent="self"),
        make_category("top"),
    ]

    sequenced = sequence_categories(categories)

    assert [item.category.code for item in sequenced] == ["top", "a", "b", "self"]
    assert [item.detached for item in sequenced] == [False, True, True, True]


def test_children_of_detached_categories_are_detached_too() -> None:
    categories = [
        make_category("orphan", parent="missing"),
        make_category("grandchild", parent="orphan"),
    ]

    sequenced = sequence_categories(categories)

    assert all(item.detached for item in sequenced)
    assert [item.category.code for item in sequenced] == ["orphan", "grandchild"]


def test_empty_input() -> None:
    assert sequence_categories([]) == []
