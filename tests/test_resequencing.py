"""
Tests for menus.services.resequencing.
"""

import pytest

from menus.exceptions import MenuBadRequest, MenuItemNotFound
from menus.models import MenuItem
from menus.services.resequencing import (
    MenuResequencer,
    ReorderNode,
    clamp_position,
    flatten_tree,
    insertion_updates,
)
from menus.services.sibling_groups import Partition
from menus.services.store import UNSET, SortUpdate

P = Partition("ADMIN", "NAV", "FULL")


@pytest.fixture
def engine(db):
    return MenuResequencer()


@pytest.fixture
def abc(make_item):
    return make_item("a", 1), make_item("b", 2), make_item("c", 3)


class TestClamp:
    @pytest.mark.parametrize("requested,expected", [(-5, 1), (0, 1), (1, 1), (3, 3), (4, 4), (5, 4), (99, 4)])
    def test_saturates_into_range(self, requested, expected):
        assert clamp_position(requested, 3) == expected

    def test_none_appends(self):
        assert clamp_position(None, 3) == 4
        assert clamp_position(None, 0) == 1


class TestInsertionUpdates:
    class Row:
        def __init__(self, pk, sort_id):
            self.pk = pk
            self.sort_id = sort_id

    def test_reserves_slot_and_skips_rows_already_in_place(self):
        rows = [self.Row(1, 1), self.Row(2, 2), self.Row(3, 3)]
        assert insertion_updates(rows, 2) == [SortUpdate(2, 3), SortUpdate(3, 4)]

    def test_append_touches_nothing(self):
        rows = [self.Row(1, 1), self.Row(2, 2)]
        assert insertion_updates(rows, 3) == []


class TestMoveWithinGroup:
    def test_move_to_front(self, engine, abc, group_order):
        """{a:1, b:2, c:3}: move(b, 1) gives {b:1, a:2, c:3}."""
        a, b, c = abc
        moved = engine.move(b.pk, 1)

        assert moved.sort_id == 1
        assert group_order() == {"b": 1, "a": 2, "c": 3}

    def test_move_down_shifts_following_items_up(self, engine, abc, group_order):
        a, b, c = abc
        engine.move(a.pk, 3)
        assert group_order() == {"b": 1, "c": 2, "a": 3}

    def test_occupant_of_target_slot_moves_one_down(self, engine, make_item, group_order):
        items = [make_item(t, i) for i, t in enumerate("abcde", start=1)]
        engine.move(items[4].pk, 2)
        assert group_order() == {"a": 1, "e": 2, "b": 3, "c": 4, "d": 5}

    @pytest.mark.parametrize("requested", [0, -3])
    def test_position_below_one_is_one(self, engine, abc, group_order, requested):
        a, b, c = abc
        engine.move(c.pk, requested)
        assert group_order() == {"c": 1, "a": 2, "b": 3}

    @pytest.mark.parametrize("requested", [3, 4, 100])
    def test_position_beyond_end_appends(self, engine, abc, group_order, requested):
        a, b, c = abc
        engine.move(a.pk, requested)
        assert group_order() == {"b": 1, "c": 2, "a": 3}

    def test_same_position_is_a_noop_for_siblings(self, engine, abc):
        a, b, c = abc
        engine.move(b.pk, 2)

        a.refresh_from_db()
        c.refresh_from_db()
        assert (a.version, c.version) == (1, 1)

    def test_bumps_version_and_records_history(self, engine, abc):
        a, b, c = abc
        before = b.history.count()
        moved = engine.move(b.pk, 1)

        assert moved.version == 2
        assert b.history.count() == before + 1
        a.refresh_from_db()
        assert a.version == 2
        assert a.history.count() >= 2

    def test_tolerates_duplicate_sort_ids(self, engine, make_item, group_order):
        make_item("a", 1)
        make_item("b", 1)
        c = make_item("c", 2)

        engine.move(c.pk, 1)
        assert group_order() == {"c": 1, "a": 2, "b": 3}


class TestMoveAcrossGroups:
    def test_reparent_into_empty_group(self, engine, make_item, group_order):
        """Root {x:1, d:2}; d moves under x: root becomes {x:1}, x's group {d:1}."""
        x = make_item("x", 1)
        d = make_item("d", 2)

        moved = engine.move(d.pk, 5, target_parent_id=x.pk)

        assert moved.parent_id == x.pk
        assert group_order() == {"x": 1}
        assert group_order(parent=x) == {"d": 1}

    def test_source_group_is_closed(self, engine, make_item, group_order):
        a = make_item("a", 1)
        b = make_item("b", 2)
        make_item("c", 3)
        target = make_item("t", 4)
        make_item("t1", 1, parent=target)
        make_item("t2", 2, parent=target)

        engine.move(b.pk, 2, target_parent_id=target.pk)

        assert group_order() == {"a": 1, "c": 2, "t": 3}
        assert group_order(parent=target) == {"t1": 1, "b": 2, "t2": 3}
        a.refresh_from_db()
        assert a.version == 1

    def test_move_to_root_clears_parent(self, engine, make_item, group_order):
        p = make_item("p", 1)
        child = make_item("child", 1, parent=p)
        make_item("sibling", 2, parent=p)

        moved = engine.move(child.pk, 1, target_parent_id=None)

        assert moved.parent_id is None
        assert group_order() == {"child": 1, "p": 2}
        assert group_order(parent=p) == {"sibling": 1}

    def test_keep_parent_by_default(self, engine, make_item, group_order):
        p = make_item("p", 1)
        make_item("c1", 1, parent=p)
        c2 = make_item("c2", 2, parent=p)

        engine.move(c2.pk, 1)

        assert group_order(parent=p) == {"c2": 1, "c1": 2}

    def test_unknown_item(self, engine):
        with pytest.raises(MenuItemNotFound):
            engine.move(12345, 1)

    def test_unknown_target_parent_leaves_groups_alone(self, engine, abc, group_order):
        a, b, c = abc
        with pytest.raises(MenuItemNotFound):
            engine.move(b.pk, 1, target_parent_id=999999)
        assert group_order() == {"a": 1, "b": 2, "c": 3}


class TestCloseGapAndRepair:
    def test_resequence_partition_densifies_every_group(self, engine, make_item, group_order):
        p = make_item("p", 3)
        make_item("q", 7)
        make_item("c1", 4, parent=p)
        make_item("c2", 4, parent=p)
        make_item("elsewhere", 9, state="RELAXED")

        changed = engine.resequence_partition(P)

        assert changed == 4
        assert group_order() == {"p": 1, "q": 2}
        assert group_order(parent=p) == {"c1": 1, "c2": 2}
        assert group_order(state="RELAXED") == {"elsewhere": 9}


class TestReorderFlat:
    def test_assigns_one_based_index(self, engine, abc, group_order):
        a, b, c = abc
        result = engine.reorder_flat(P, [c.pk, a.pk, b.pk])

        assert group_order() == {"c": 1, "a": 2, "b": 3}
        assert [i.menu_item_text for i in result] == ["c", "a", "b"]

    def test_reorders_a_child_group(self, engine, make_item, group_order):
        p = make_item("p", 1)
        c1 = make_item("c1", 1, parent=p)
        c2 = make_item("c2", 2, parent=p)

        engine.reorder_flat(P, [c2.pk, c1.pk])

        assert group_order(parent=p) == {"c2": 1, "c1": 2}
        assert group_order() == {"p": 1}

    def test_id_outside_partition_is_rejected(self, engine, abc, make_item):
        a, b, c = abc
        stranger = make_item("stranger", 1, state="COMPACT")

        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, [stranger.pk, c.pk, b.pk, a.pk])

        assert set(MenuItem.objects.values_list("version", flat=True)) == {1}

    def test_partial_list_is_rejected(self, engine, abc, group_order):
        a, b, c = abc

        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, [c.pk])

        assert group_order() == {"a": 1, "b": 2, "c": 3}

    def test_repeated_ids_are_rejected(self, engine, abc, group_order):
        a, b, c = abc

        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, [a.pk, b.pk, a.pk, c.pk])

        assert group_order() == {"a": 1, "b": 2, "c": 3}

    def test_ids_from_several_groups_are_rejected(self, engine, make_item, group_order):
        p = make_item("p", 1)
        ch = make_item("ch", 1, parent=p)

        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, [p.pk, ch.pk])

        assert group_order() == {"p": 1}
        assert group_order(parent=p) == {"ch": 1}

    def test_empty_list_is_rejected(self, engine, abc):
        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, [])

    def test_result_excludes_archived(self, engine, make_item):
        a = make_item("a", 1)
        b = make_item("b", 2, archived=True)

        result = engine.reorder_flat(P, [b.pk, a.pk])

        assert result == [a]
        b.refresh_from_db()
        assert b.sort_id == 1

    def test_invalid_id(self, engine, abc):
        with pytest.raises(MenuBadRequest):
            engine.reorder_flat(P, ["not-an-id"])


class TestFlattenTree:
    def test_depth_first_with_inherited_parents(self):
        tree = [
            ReorderNode(1, 1, children=[ReorderNode(3, 1), ReorderNode(4, 2, children=[ReorderNode(5, 1)])]),
            ReorderNode(2, 2, parent_id=None),
        ]
        assert flatten_tree(tree) == [
            SortUpdate(1, 1, UNSET),
            SortUpdate(3, 1, 1),
            SortUpdate(4, 2, 1),
            SortUpdate(5, 1, 4),
            SortUpdate(2, 2, None),
        ]

    def test_from_dict(self):
        node = ReorderNode.from_dict({"id": "7", "sortId": "2", "children": [{"id": 8, "sortId": 1, "parentId": None}]})
        assert node.id == "7"
        assert node.sort_id == 2
        assert node.parent_id is UNSET
        assert node.children[0].parent_id is None

    @pytest.mark.parametrize("bad", [{"id": 1}, {"sortId": 1}, {"id": 1, "sortId": "x"}, {"id": 1, "sortId": -1}, "nope"])
    def test_from_dict_rejects_malformed_nodes(self, bad):
        with pytest.raises(MenuBadRequest):
            ReorderNode.from_dict(bad)


class TestReorderTree:
    @pytest.fixture
    def tree_items(self, make_item):
        r1 = make_item("r1", 1)
        r2 = make_item("r2", 2)
        ch = make_item("ch", 1, parent=r1)
        return r1, r2, ch

    def test_reorders_and_reparents(self, engine, tree_items, group_order):
        r1, r2, ch = tree_items
        tree = [
            {"id": r2.pk, "sortId": 1},
            {"id": r1.pk, "sortId": 2},
            {"id": ch.pk, "sortId": 1, "parentId": r2.pk},
        ]
        engine.reorder_tree(P, tree)

        assert group_order() == {"r2": 1, "r1": 2}
        assert group_order(parent=r2) == {"ch": 1}
        assert group_order(parent=r1) == {}

    def test_nested_children_inherit_parent(self, engine, tree_items, group_order):
        r1, r2, ch = tree_items
        tree = [
            {"id": r1.pk, "sortId": 1},
            {"id": r2.pk, "sortId": 2, "children": [{"id": ch.pk, "sortId": 1}]},
        ]
        result = engine.reorder_tree(P, tree)

        ch.refresh_from_db()
        assert ch.parent_id == r2.pk
        assert {i.pk for i in result} == {r1.pk, r2.pk, ch.pk}

    def test_missing_id_is_rejected_without_writes(self, engine, tree_items):
        r1, r2, ch = tree_items
        tree = [{"id": r2.pk, "sortId": 1}, {"id": r1.pk, "sortId": 2}]

        with pytest.raises(MenuBadRequest) as exc:
            engine.reorder_tree(P, tree)

        assert "3 item(s)" in exc.value.message
        assert set(MenuItem.objects.values_list("version", flat=True)) == {1}
        r1.refresh_from_db()
        assert r1.sort_id == 1

    def test_id_from_other_partition_is_rejected(self, engine, tree_items, make_item):
        r1, r2, ch = tree_items
        stranger = make_item("stranger", 1, domain="WORKSHOP")
        tree = [
            {"id": r1.pk, "sortId": 1, "children": [{"id": ch.pk, "sortId": 1}]},
            {"id": stranger.pk, "sortId": 2},
        ]
        with pytest.raises(MenuBadRequest):
            engine.reorder_tree(P, tree)

    def test_duplicate_id_is_rejected(self, engine, tree_items):
        r1, r2, ch = tree_items
        tree = [
            {"id": r1.pk, "sortId": 1, "children": [{"id": ch.pk, "sortId": 1}]},
            {"id": r2.pk, "sortId": 2},
            {"id": r2.pk, "sortId": 3},
        ]
        with pytest.raises(MenuBadRequest):
            engine.reorder_tree(P, tree)

    def test_unknown_parent_reference_is_rejected(self, engine, tree_items):
        r1, r2, ch = tree_items
        tree = [
            {"id": r1.pk, "sortId": 1},
            {"id": r2.pk, "sortId": 2},
            {"id": ch.pk, "sortId": 1, "parentId": 999999},
        ]
        with pytest.raises(MenuBadRequest):
            engine.reorder_tree(P, tree)

    def test_self_parent_is_rejected(self, engine, tree_items):
        r1, r2, ch = tree_items
        tree = [
            {"id": r1.pk, "sortId": 1, "parentId": r1.pk},
            {"id": r2.pk, "sortId": 2, "children": [{"id": ch.pk, "sortId": 1}]},
        ]
        with pytest.raises(MenuBadRequest):
            engine.reorder_tree(P, tree)
