from django.contrib import admin, messages
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from django_object_actions import DjangoObjectActions, action
from simple_history.admin import SimpleHistoryAdmin
from unfold.admin import ModelAdmin

from menus.exceptions import MenuError
from menus.forms import DEFAULT_DESCRIPTION, MenuItemAdminForm
from menus.models import MenuItem
from menus.services import MenuItemService

ADMIN_FIELDS = (
    "menu_item_text",
    "route_path",
    "tooltip_text",
    "nav_svg_path",
    "header_svg_path",
    "auth_required",
    "description",
    "domain",
    "structural_subtype",
    "state",
    "parent",
    "sort_id",
    "archived",
)


def _service_fields(cleaned_data, names):
    fields = {}
    for name in names:
        if name == "parent":
            parent = cleaned_data.get("parent")
            fields["parent_id"] = parent.pk if parent else None
        elif name in ADMIN_FIELDS:
            fields[name] = cleaned_data.get(name)
    return fields


@admin.register(MenuItem)
class MenuItemAdmin(DjangoObjectActions, SimpleHistoryAdmin, ModelAdmin):
    """Edits go through MenuItemService so sibling groups stay dense."""

    form = MenuItemAdminForm
    list_display = ("menu_item_text", "route_path", "domain", "structural_subtype", "state", "parent", "sort_id", "archived")
    list_filter = ("domain", "structural_subtype", "state", "archived", "auth_required")
    search_fields = ("menu_item_text", "route_path", "description")
    ordering = ("domain", "structural_subtype", "state", "parent_id", "sort_id", "id")
    autocomplete_fields = ("parent",)
    readonly_fields = ("version", "last_updated")

    fieldsets = (
        (_("General"), {"fields": ("menu_item_text", "route_path", "tooltip_text", "description", "auth_required")}),
        (_("Icons"), {"fields": ("nav_svg_path", "header_svg_path")}),
        (_("Placement"), {"fields": ("domain", "structural_subtype", "state", "parent", "sort_id", "archived")}),
        (_("Metadata"), {"fields": ("version", "last_updated")}),
    )

    actions = ["resequence_selected"]
    change_actions = ("move_up", "move_down", "archive_action", "unarchive_action")

    service_class = MenuItemService

    def get_change_actions(self, request, object_id, form_url):
        obj = self.get_object(request, object_id)
        if not obj:
            return ()
        archive = "unarchive_action" if obj.archived else "archive_action"
        return ("move_up", "move_down", archive)

    def save_model(self, request, obj, form, change):
        service = self.service_class()
        if change:
            updated = service.update(obj.pk, _service_fields(form.cleaned_data, form.changed_data))
            obj.sort_id = updated.sort_id
            obj.version = updated.version
            obj.last_updated = updated.last_updated
        else:
            fields = _service_fields(form.cleaned_data, ADMIN_FIELDS)
            fields["description"] = fields.get("description") or DEFAULT_DESCRIPTION
            created = service.create(fields)
            obj.pk = created.pk
            obj.refresh_from_db()

    def delete_model(self, request, obj):
        self.service_class().remove(obj.pk)

    @transaction.atomic
    def delete_queryset(self, request, queryset):
        service = self.service_class()
        for pk in queryset.values_list("pk", flat=True):
            # children cascade, so an earlier delete may already have taken it
            if MenuItem.objects.filter(pk=pk).exists():
                service.remove(pk)

    def _run(self, request, fn, ok_message):
        try:
            fn()
            self.message_user(request, ok_message, level=messages.SUCCESS)
        except MenuError as e:
            self.message_user(request, f"Could not update menu item: {e.message}", level=messages.ERROR)

    @action(label="Move up", description="Move one position up within its group")
    def move_up(self, request, obj):
        self._run(request, lambda: self.service_class().move(obj.pk, max(obj.sort_id - 1, 1)), "Moved up.")

    @action(label="Move down", description="Move one position down within its group")
    def move_down(self, request, obj):
        self._run(request, lambda: self.service_class().move(obj.pk, obj.sort_id + 1), "Moved down.")

    @action(label="Archive", description="Hide from default reads; keeps its position")
    def archive_action(self, request, obj):
        self._run(request, lambda: self.service_class().archive(obj.pk), "Archived.")

    @action(label="Unarchive", description="Show in default reads again")
    def unarchive_action(self, request, obj):
        self._run(request, lambda: self.service_class().unarchive(obj.pk), "Unarchived.")

    @admin.action(description="Re-sequence the groups of the selected items")
    def resequence_selected(self, request, queryset):
        service = self.service_class()
        changed = 0
        for domain in queryset.order_by().values_list("domain", flat=True).distinct():
            changed += service.resequence(domain=domain)
        self.message_user(request, f"Re-sequenced, {changed} item(s) renumbered.", level=messages.SUCCESS)
