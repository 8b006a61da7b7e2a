"""Pytest fixtures for the menus tests."""

import pytest

from menus.models import MenuItem
from menus.services import MenuItemService

PARTITION = {"domain": "ADMIN", "structural_subtype": "NAV", "state": "FULL"}


@pytest.fixture
def service(db):
    return MenuItemService()


@pytest.fixture
def make_item(db):
    """Insert a row directly, bypassing resequencing (lets tests set up anomalies)."""

    def make(text, sort_id, parent=None, **fields):
        data = {**PARTITION, "menu_item_text": text, "route_path": f"/{text}", **fields}
        return MenuItem.objects.create(sort_id=sort_id, parent=parent, **data)

    return make


@pytest.fixture
def group_order(db):
    """Return {text: sort_id} of a sibling group, in display order."""

    def order(parent=None, **partition):
        qs = MenuItem.objects.filter(**{**PARTITION, **partition})
        if parent is None:
            qs = qs.filter(parent__isnull=True)
        else:
            qs = qs.filter(parent=parent)
        return {i.menu_item_text: i.sort_id for i in qs.order_by("sort_id", "id")}

    return order
