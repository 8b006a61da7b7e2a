import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from menus.exceptions import MenuError
from menus.forms import MenuItemForm
from menus.serializers import from_wire
from menus.services import MenuItemService

INHERITED = ("domain", "structuralSubtype", "state")


class Command(BaseCommand):
    help = "Import menu items from a JSON file (list of items in wire format, optional nested 'children')."

    def add_arguments(self, parser):
        parser.add_argument(
            "--path",
            default=Path(settings.BASE_DIR) / "external_files" / "menu_items.json",
            help="Path to menu_items.json",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        path = options["path"]
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not read {path}: {e}") from e

        if not isinstance(data, list):
            raise CommandError("Expected a JSON list of menu items")

        self.service = MenuItemService()
        created = self._import(data, parent=None)

        self.stdout.write(self.style.SUCCESS(f"Imported menu items: created={created}"))

    def _import(self, rows, parent):
        created = 0
        for row in rows:
            row = dict(row)
            children = row.pop("children", None) or []
            if parent is not None:
                for key, attr in zip(INHERITED, ("domain", "structural_subtype", "state")):
                    row.setdefault(key, getattr(parent, attr))
                row["parentId"] = parent.pk

            form = MenuItemForm(from_wire(row))
            if not form.is_valid():
                raise CommandError(f"Invalid menu item {row.get('menuItemText')!r}: {form.errors.as_text()}")
            try:
                item = self.service.create(form.cleaned_fields())
            except MenuError as e:
                raise CommandError(f"Could not create {row.get('menuItemText')!r}: {e.message}") from e

            created += 1 + self._import(children, parent=item)
        return created
