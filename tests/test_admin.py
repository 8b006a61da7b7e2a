"""
Tests for the MenuItem admin: saves and object actions go through the service.
"""

import pytest
from django.urls import reverse

from menus.models import MenuItem


def add_form(text, **extra):
    data = {
        "menu_item_text": text,
        "route_path": f"/{text}",
        "tooltip_text": "",
        "description": "",
        "nav_svg_path": "",
        "header_svg_path": "",
        "domain": "ADMIN",
        "structural_subtype": "NAV",
        "state": "FULL",
        "parent": "",
        "sort_id": "1",
        "_save": "Save",
    }
    data.update(extra)
    return data


class TestMenuItemAdmin:
    def test_changelist(self, admin_client, make_item):
        make_item("a", 1)
        resp = admin_client.get(reverse("admin:menus_menuitem_changelist"))
        assert resp.status_code == 200

    def test_add_inserts_through_service(self, admin_client, make_item, group_order):
        make_item("a", 1)

        resp = admin_client.post(reverse("admin:menus_menuitem_add"), add_form("first"))

        assert resp.status_code == 302
        assert group_order() == {"first": 1, "a": 2}

    def test_add_without_position_appends_with_default_description(self, admin_client, make_item, group_order):
        make_item("a", 1)

        resp = admin_client.post(reverse("admin:menus_menuitem_add"), add_form("last", sort_id=""))

        assert resp.status_code == 302
        assert group_order() == {"a": 1, "last": 2}
        assert MenuItem.objects.get(menu_item_text="last").description == "No description provided"

    def test_delete_closes_gap(self, admin_client, make_item, group_order):
        a = make_item("a", 1)
        make_item("b", 2)

        resp = admin_client.post(reverse("admin:menus_menuitem_delete", args=[a.pk]), {"post": "yes"})

        assert resp.status_code == 302
        assert group_order() == {"b": 1}

    @pytest.mark.parametrize("tool,expected", [("move_up", {"b": 1, "a": 2}), ("move_down", {"a": 1, "b": 2})])
    def test_move_actions(self, admin_client, make_item, group_order, tool, expected):
        make_item("a", 1)
        b = make_item("b", 2)

        admin_client.post(reverse("admin:menus_menuitem_actions", args=[b.pk, tool]))

        assert group_order() == expected

    def test_archive_action(self, admin_client, make_item):
        a = make_item("a", 1)

        admin_client.post(reverse("admin:menus_menuitem_actions", args=[a.pk, "archive_action"]))

        a.refresh_from_db()
        assert a.archived is True
        assert a.sort_id == 1
