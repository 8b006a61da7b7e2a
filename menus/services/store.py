from __future__ import annotations

import logging
from typing import Iterable, NamedTuple

from django.db import IntegrityError, transaction
from django.db.models import Q
from simple_history.utils import bulk_update_with_history

from menus.exceptions import MenuConflict, MenuItemNotFound
from menus.models import MenuItem

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


# "leave the field alone", as opposed to None which means "clear it"
UNSET = _Unset()

SIBLING_ORDER = ("sort_id", "id")


class SortUpdate(NamedTuple):
    item_id: int
    sort_id: int
    parent_id: object = UNSET


class MenuItemStore:
    """Persistence used by the resequencing engine.

    Point lookup, filtered scan with sort, and a batched conditional update.
    Every write bumps version and last_updated.
    """

    model = MenuItem
    batch_size = 500

    def __init__(self, model=None):
        if model is not None:
            self.model = model

    def atomic(self):
        return transaction.atomic()

    def get(self, item_id, lock=False):
        qs = self.model.objects.all()
        if lock:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=item_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise MenuItemNotFound(item_id)

    def exists(self, item_id) -> bool:
        try:
            return self.model.objects.filter(pk=item_id).exists()
        except (ValueError, TypeError):
            return False

    def scan(self, q: Q | None = None, order_by=SIBLING_ORDER, lock=False) -> list:
        qs = self.model.objects.all()
        if q is not None:
            qs = qs.filter(q)
        if lock:
            qs = qs.select_for_update()
        return list(qs.order_by(*order_by))

    def count(self, q: Q | None = None) -> int:
        qs = self.model.objects.all()
        if q is not None:
            qs = qs.filter(q)
        return qs.count()

    def create(self, **fields):
        try:
            with transaction.atomic():
                return self.model.objects.create(**fields)
        except IntegrityError as e:
            raise MenuConflict("MenuItem with these properties already exists") from e

    def save(self, item, update_fields=None):
        item.touch()
        if update_fields is not None:
            update_fields = set(update_fields) | {"version", "last_updated"}
        try:
            with transaction.atomic():
                item.save(update_fields=update_fields)
        except IntegrityError as e:
            raise MenuConflict("MenuItem with these properties already exists") from e
        return item

    def delete(self, item):
        item.delete()

    def bulk_apply(self, updates: Iterable[SortUpdate], within: Q | None = None) -> int:
        """Apply independent (filter, values) updates in one batch.

        Each update only touches the row matching its id and `within`; ids that
        match nothing are skipped. Returns the number of rows written.
        """
        updates = list(updates)
        if not updates:
            return 0

        by_id = {u.item_id: u for u in updates}
        qs = self.model.objects.select_for_update().filter(pk__in=list(by_id))
        if within is not None:
            qs = qs.filter(within)

        fields = {"sort_id", "version", "last_updated"}
        objs = []
        for obj in qs:
            u = by_id[obj.pk]
            obj.sort_id = u.sort_id
            if u.parent_id is not UNSET:
                obj.parent_id = u.parent_id
                fields.add("parent")
            obj.touch()
            objs.append(obj)

        if objs:
            bulk_update_with_history(objs, self.model, sorted(fields), batch_size=self.batch_size)

        skipped = len(by_id) - len(objs)
        if skipped:
            logger.debug("bulk_apply skipped %s update(s) that matched no row", skipped)
        return len(objs)
