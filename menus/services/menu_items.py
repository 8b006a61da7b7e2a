"""Menu item operations used by the API views, admin and commands.

Anything that changes where an item sits (create, move, a field edit that
changes its group, delete) goes through MenuResequencer so sibling groups stay
dense. Plain field edits only bump version/last_updated.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db.models import Q
from django.utils import timezone

from menus.exceptions import MenuBadRequest, MenuConflict
from menus.filters import MenuItemFilter
from menus.services.hierarchy import HIERARCHY_ORDER, build_hierarchy
from menus.services.resequencing import KEEP_PARENT, MenuResequencer
from menus.services.sibling_groups import GroupKey, Partition
from menus.services.store import SIBLING_ORDER, UNSET, MenuItemStore

logger = logging.getLogger(__name__)

CONTENT_FIELDS = (
    "menu_item_text",
    "route_path",
    "tooltip_text",
    "nav_svg_path",
    "header_svg_path",
    "auth_required",
    "description",
    "archived",
)
PARTITION_FIELDS = ("domain", "structural_subtype", "state")
EDITABLE_FIELDS = CONTENT_FIELDS + PARTITION_FIELDS + ("parent_id", "sort_id")


def _partition(domain, structural_subtype, state) -> Partition:
    try:
        return Partition.parse(domain, structural_subtype, state)
    except ValueError as e:
        raise MenuBadRequest(str(e)) from e


class MenuItemService:
    def __init__(self, store: Optional[MenuItemStore] = None, resequencer: Optional[MenuResequencer] = None):
        self.store = store or MenuItemStore()
        self.resequencer = resequencer or MenuResequencer(self.store)

    # -- reads -----------------------------------------------------------

    def find_one(self, item_id):
        return self.store.get(item_id)

    def find_all(self, domain=None, structural_subtype=None, state=None, archived=None, auth_required=None):
        params = {
            "domain": domain,
            "structuralSubtype": structural_subtype,
            "state": state,
            "archived": archived,
            "authRequired": auth_required,
        }
        return self.filter_items({k: v for k, v in params.items() if v is not None})

    def filter_items(self, params):
        """Items matching MenuItemFilter `params` (query-string names), by sort_id."""
        filterset = MenuItemFilter(params, queryset=self.store.model.objects.all())
        if not filterset.is_valid():
            raise MenuBadRequest(f"Invalid filter: {filterset.errors.as_json()}")
        return list(filterset.qs.order_by(*SIBLING_ORDER))

    def find_by_group(self, domain, structural_subtype=None, state=None, include_archived=False):
        q = Q(domain=domain)
        if structural_subtype is not None:
            q &= Q(structural_subtype=structural_subtype)
        if state is not None:
            q &= Q(state=state)
        if not include_archived:
            q &= Q(archived=False)
        return self.store.scan(q, order_by=HIERARCHY_ORDER)

    def build_hierarchy(self, domain, include_archived=False):
        return build_hierarchy(domain, include_archived=include_archived, store=self.store)

    # -- writes ----------------------------------------------------------

    def create(self, data: dict):
        data = dict(data)
        unknown = set(data) - set(EDITABLE_FIELDS)
        if unknown:
            raise MenuBadRequest(f"Unknown field(s): {', '.join(sorted(unknown))}")

        partition = _partition(*(data.get(f) for f in PARTITION_FIELDS))
        requested = data.pop("sort_id", None)
        parent_id = data.pop("parent_id", None)

        with self.store.atomic():
            if parent_id is not None:
                parent_id = self.store.get(parent_id).pk
            key = GroupKey(*partition, parent_id)
            position = self.resequencer.make_room(key, requested)
            item = self.store.create(
                **data,
                parent_id=parent_id,
                sort_id=position,
                last_updated=timezone.now(),
            )

        logger.info("Created menu item %s at %s in %s", item.pk, position, key)
        return item

    def update(self, item_id, fields: dict, expected_version=None):
        """Edit an item.

        A change of domain/structural_subtype/state/parent relocates the item:
        its old group is closed and it is inserted into the new one at
        sort_id (or appended). A sort_id change alone is a move.
        """
        fields = dict(fields)
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise MenuBadRequest(f"Unknown field(s): {', '.join(sorted(unknown))}")

        if expected_version is not None:
            try:
                expected_version = int(expected_version)
            except (TypeError, ValueError):
                raise MenuBadRequest(f"Invalid version: {expected_version!r}")

        with self.store.atomic():
            item = self.store.get(item_id, lock=True)
            if expected_version is not None and expected_version != item.version:
                raise MenuConflict(
                    f"MenuItem {item.pk} is at version {item.version}, not {expected_version}"
                )

            source = GroupKey.of(item)
            requested = fields.pop("sort_id", UNSET)
            if "parent_id" in fields:
                parent_id = fields.pop("parent_id")
                item.parent_id = self.store.get(parent_id).pk if parent_id is not None else None
            for name, value in fields.items():
                setattr(item, name, value)
            _partition(item.domain, item.structural_subtype, item.state)

            if GroupKey.of(item) != source:
                return self.resequencer.place(item, source, None if requested is UNSET else requested)
            if requested is not UNSET and requested is not None and int(requested) != item.sort_id:
                return self.resequencer.place(item, source, requested)
            return self.store.save(item)

    def remove(self, item_id):
        """Delete an item (its children cascade) and close the gap it leaves."""
        with self.store.atomic():
            item = self.store.get(item_id, lock=True)
            key = GroupKey.of(item)
            pk = item.pk
            self.store.delete(item)
            self.resequencer.close_gap(key)
        logger.info("Removed menu item %s from %s", pk, key)

    def archive(self, item_id):
        return self._set_archived(item_id, True)

    def unarchive(self, item_id):
        return self._set_archived(item_id, False)

    def _set_archived(self, item_id, archived: bool):
        with self.store.atomic():
            item = self.store.get(item_id, lock=True)
            item.archived = archived
            return self.store.save(item, update_fields=["archived"])

    # -- ordering --------------------------------------------------------

    def move(self, item_id, requested_position, target_parent_id=KEEP_PARENT):
        return self.resequencer.move(item_id, requested_position, target_parent_id)

    def reorder_flat(self, domain, structural_subtype, state, ordered_ids):
        return self.resequencer.reorder_flat(_partition(domain, structural_subtype, state), ordered_ids)

    def reorder_tree(self, domain, structural_subtype, state, tree):
        return self.resequencer.reorder_tree(_partition(domain, structural_subtype, state), tree)

    def resequence(self, domain=None) -> int:
        """Re-densify every sibling group, optionally for one domain only."""
        q = Q(domain=domain) if domain is not None else Q()
        partitions = {i.partition for i in self.store.scan(q)}
        return sum(self.resequencer.resequence_partition(Partition(*p)) for p in sorted(partitions))
