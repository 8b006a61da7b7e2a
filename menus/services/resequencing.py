"""Sibling resequencing.

Keeps sort_id dense (1..N) inside every sibling group when items are created,
moved inside their group, or reparented. A move runs in three phases:

1) CLOSE_SOURCE        - only when the item changes group: renumber the group
                         it leaves so no hole remains
2) INSERT_DESTINATION  - renumber the destination group around the slot
                         reserved for the item (the requested position,
                         clamped to 1..N+1)
3) COMMIT              - write the item's new sort_id and parent

All phases run inside one transaction and the rows they read are locked
(select_for_update), so two concurrent moves in the same group serialize on
databases that support row locks. On SQLite the transaction is the only guard.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.core.exceptions import ValidationError
from django.db.models import Q

from menus.exceptions import MenuBadRequest
from menus.services.sibling_groups import GroupKey, Partition, sibling_filter
from menus.services.store import UNSET, MenuItemStore, SortUpdate

logger = logging.getLogger(__name__)

# move(..., target_parent_id=KEEP_PARENT) keeps the current parent;
# target_parent_id=None moves the item to the root group.
KEEP_PARENT = UNSET


class MovePhase(enum.Enum):
    CLOSE_SOURCE = "close_source"
    INSERT_DESTINATION = "insert_destination"
    COMMIT = "commit"


def clamp_position(requested, group_size: int) -> int:
    """Saturate `requested` into 1..group_size+1. None appends."""
    if requested is None:
        return group_size + 1
    return max(1, min(int(requested), group_size + 1))


def dense_updates(siblings) -> list[SortUpdate]:
    """Updates renumbering `siblings` (already in display order) as 1..M."""
    return [SortUpdate(s.pk, i) for i, s in enumerate(siblings, start=1) if s.sort_id != i]


def insertion_updates(siblings, position: int) -> list[SortUpdate]:
    """Updates renumbering `siblings` as 1..N+1 with `position` left free.

    Siblings already sitting in their new slot are not touched.
    """
    updates = []
    slot = 1
    for s in siblings:
        if slot == position:
            slot += 1
        if s.sort_id != slot:
            updates.append(SortUpdate(s.pk, slot))
        slot += 1
    return updates


@dataclass
class ReorderNode:
    """One node of a hierarchical reorder request."""

    id: object
    sort_id: int
    parent_id: object = UNSET
    children: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ReorderNode":
        if not isinstance(data, dict) or "id" not in data or "sortId" not in data:
            raise MenuBadRequest("Each reorder node needs 'id' and 'sortId'")
        try:
            sort_id = int(data["sortId"])
        except (TypeError, ValueError):
            raise MenuBadRequest(f"Invalid sortId for item {data['id']!r}")
        if sort_id < 0:
            raise MenuBadRequest(f"sortId of item {data['id']!r} must not be negative")
        children = data.get("children") or []
        if not isinstance(children, list):
            raise MenuBadRequest(f"'children' of item {data['id']!r} must be a list")
        return cls(
            id=data["id"],
            sort_id=sort_id,
            parent_id=data["parentId"] if "parentId" in data else UNSET,
            children=[cls.from_dict(c) for c in children],
        )


def flatten_tree(nodes, enclosing_id=UNSET) -> list[SortUpdate]:
    """Depth-first (id, sort_id, parent_id) assignments.

    An explicit parent_id wins (None clears it). A nested node without one
    takes the id of the node it is nested in; a top-level node without one
    keeps its current parent.
    """
    updates = []
    for node in nodes:
        parent_id = node.parent_id if node.parent_id is not UNSET else enclosing_id
        updates.append(SortUpdate(node.id, node.sort_id, parent_id))
        if node.children:
            updates.extend(flatten_tree(node.children, enclosing_id=node.id))
    return updates


class MenuResequencer:
    def __init__(self, store: Optional[MenuItemStore] = None):
        self.store = store or MenuItemStore()

    # -- building blocks -------------------------------------------------

    def close_gap(self, key: GroupKey, exclude_id=None) -> int:
        """Renumber group `key` as 1..M (minus `exclude_id`). Returns M."""
        siblings = self.store.scan(sibling_filter(key, exclude_id=exclude_id), lock=True)
        updates = dense_updates(siblings)
        self.store.bulk_apply(updates)
        logger.debug("close_gap %s: %s sibling(s), %s renumbered", key, len(siblings), len(updates))
        return len(siblings)

    def make_room(self, key: GroupKey, requested_position=None, exclude_id=None) -> int:
        """Free a slot in group `key` and return it (clamped to 1..N+1)."""
        siblings = self.store.scan(sibling_filter(key, exclude_id=exclude_id), lock=True)
        position = clamp_position(requested_position, len(siblings))
        updates = insertion_updates(siblings, position)
        self.store.bulk_apply(updates)
        logger.debug(
            "make_room %s: slot %s (requested %s), %s sibling(s) shifted",
            key, position, requested_position, len(updates),
        )
        return position

    # -- operations ------------------------------------------------------

    def move(self, item_id, requested_position, target_parent_id=KEEP_PARENT):
        """Move an item to `requested_position`, optionally under a new parent.

        Raises MenuItemNotFound for an unknown item or target parent.
        """
        with self.store.atomic():
            item = self.store.get(item_id, lock=True)
            source = GroupKey.of(item)
            if target_parent_id is not KEEP_PARENT:
                item.parent_id = self.store.get(target_parent_id).pk if target_parent_id is not None else None
            return self.place(item, source, requested_position, update_fields=["sort_id", "parent"])

    def place(self, item, source: GroupKey, requested_position=None, update_fields=None):
        """Run the three move phases for `item`, whose group fields may already
        have been changed in memory. `source` is the group it is leaving.
        """
        destination = GroupKey.of(item)
        phase = MovePhase.CLOSE_SOURCE
        try:
            with self.store.atomic():
                if destination != source:
                    self.close_gap(source, exclude_id=item.pk)

                phase = MovePhase.INSERT_DESTINATION
                position = self.make_room(destination, requested_position, exclude_id=item.pk)

                phase = MovePhase.COMMIT
                item.sort_id = position
                self.store.save(item, update_fields=update_fields)
        except Exception:
            logger.exception("Placing menu item %s failed during %s", item.pk, phase.value)
            raise

        logger.info(
            "Menu item %s placed at %s in %s (from %s)", item.pk, item.sort_id, destination, source
        )
        return item

    def reorder_flat(self, partition: Partition, ordered_ids):
        """Renumber one sibling group of `partition` as 1..N in the given order.

        `ordered_ids` must name every member of that group, archived ones
        included, exactly once. Otherwise MenuBadRequest and nothing is written.
        """
        ids = [self._pk(item_id) for item_id in ordered_ids]
        if not ids:
            raise MenuBadRequest("No menu item ids given")
        if len(set(ids)) != len(ids):
            raise MenuBadRequest("Menu item ids must not repeat")

        with self.store.atomic():
            items = self.store.scan(partition.as_filter() & Q(pk__in=ids), lock=True)
            if len(items) != len(ids):
                raise MenuBadRequest(
                    f"{len(ids) - len(items)} of {len(ids)} menu item(s) do not exist or do not "
                    f"belong to the specified domain/subtype/state"
                )
            groups = {GroupKey.of(item) for item in items}
            if len(groups) != 1:
                raise MenuBadRequest(f"Menu items span {len(groups)} sibling groups, expected one")
            key = groups.pop()
            size = self.store.count(sibling_filter(key))
            if size != len(ids):
                raise MenuBadRequest(f"Sibling group has {size} item(s), got {len(ids)}")

            updates = [SortUpdate(pk, i) for i, pk in enumerate(ids, start=1)]
            applied = self.store.bulk_apply(updates, within=sibling_filter(key))

        logger.info("reorder_flat %s: %s of %s item(s) updated", key, applied, len(updates))
        return self.store.scan(partition.as_filter() & Q(archived=False))

    def reorder_tree(self, partition: Partition, tree):
        """Apply a complete hierarchical ordering for `partition`.

        The tree must name every item of the partition exactly once and
        nothing else, otherwise MenuBadRequest and nothing is written. No
        gap-closing: the caller supplies consistent sort_ids.
        """
        nodes = [n if isinstance(n, ReorderNode) else ReorderNode.from_dict(n) for n in tree]
        updates = [
            SortUpdate(
                self._pk(u.item_id),
                u.sort_id,
                u.parent_id if u.parent_id is UNSET or u.parent_id is None else self._pk(u.parent_id),
            )
            for u in flatten_tree(nodes)
        ]
        ids = [u.item_id for u in updates]

        with self.store.atomic():
            scope = partition.as_filter()
            total = self.store.count(scope)
            matching = self.store.count(scope & Q(pk__in=ids))
            if len(set(ids)) != len(ids) or matching != len(ids) or total != len(ids):
                raise MenuBadRequest(
                    f"Some menu items do not exist or do not belong to the specified "
                    f"domain/subtype/state: partition has {total} item(s), tree names "
                    f"{len(ids)} ({len(set(ids))} distinct), {matching} of them found"
                )

            parent_ids = {u.parent_id for u in updates if u.parent_id is not UNSET and u.parent_id is not None}
            outside = parent_ids - set(ids)
            if outside:
                raise MenuBadRequest(f"Parent id(s) not in this domain/subtype/state: {sorted(outside)}")
            if any(u.parent_id == u.item_id for u in updates):
                raise MenuBadRequest("A menu item cannot be its own parent")

            applied = self.store.bulk_apply(updates, within=scope)

        logger.info("reorder_tree %s: %s item(s) updated", tuple(partition), applied)
        return self.store.scan(partition.as_filter() & Q(archived=False))

    def resequence_partition(self, partition: Partition) -> int:
        """Re-densify every sibling group of `partition`. Returns rows changed."""
        with self.store.atomic():
            groups = {}
            for item in self.store.scan(partition.as_filter(), lock=True):
                groups.setdefault(item.parent_id, []).append(item)

            updates = []
            for siblings in groups.values():
                updates.extend(dense_updates(siblings))
            changed = self.store.bulk_apply(updates)

        logger.info(
            "resequence %s: %s group(s), %s item(s) renumbered", tuple(partition), len(groups), changed
        )
        return changed

    def _pk(self, value):
        try:
            return self.store.model._meta.pk.to_python(value)
        except ValidationError:
            raise MenuBadRequest(f"Invalid menu item id: {value!r}")
