from django import forms

from menus.models import Domain, MenuItem, State, StructuralSubtype

DEFAULT_DESCRIPTION = "No description provided"


class MenuItemForm(forms.Form):
    """Validates create/update payloads (model attribute names).

    With partial=True only the fields present in the payload are validated,
    so an update can send just what changes.
    """

    menu_item_text = forms.CharField(max_length=255)
    route_path = forms.CharField(max_length=500)
    tooltip_text = forms.CharField(max_length=500, required=False)
    nav_svg_path = forms.CharField(max_length=500, required=False)
    header_svg_path = forms.CharField(max_length=500, required=False)
    auth_required = forms.BooleanField(required=False)
    description = forms.CharField(max_length=500, required=False)
    domain = forms.ChoiceField(choices=Domain.choices)
    structural_subtype = forms.ChoiceField(choices=StructuralSubtype.choices)
    state = forms.ChoiceField(choices=State.choices)
    parent_id = forms.IntegerField(required=False, min_value=1)
    sort_id = forms.IntegerField(required=False, help_text="Lower numbers appear first; clamped to 1..N+1.")
    archived = forms.BooleanField(required=False)

    def __init__(self, *args, partial=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.partial = partial
        if partial:
            for name in list(self.fields):
                if name not in self.data:
                    del self.fields[name]

    def cleaned_fields(self) -> dict:
        data = dict(self.cleaned_data)
        if not self.partial:
            if not data.get("description"):
                data["description"] = DEFAULT_DESCRIPTION
            if data.get("sort_id") is None:
                data.pop("sort_id", None)
        return data


class MoveForm(forms.Form):
    sort_id = forms.IntegerField()
    parent_id = forms.IntegerField(required=False, min_value=1)

    def has_parent(self) -> bool:
        """True when the payload names a parent (null = move to root)."""
        return "parent_id" in self.data


class ReorderForm(forms.Form):
    item_ids = forms.JSONField()

    def clean_item_ids(self):
        ids = self.cleaned_data["item_ids"]
        if not isinstance(ids, list) or not ids:
            raise forms.ValidationError("itemIds must be a non-empty list of ids.")
        return ids


class ReorderTreeForm(forms.Form):
    items = forms.JSONField()

    def clean_items(self):
        items = self.cleaned_data["items"]
        if not isinstance(items, list) or not items:
            raise forms.ValidationError("items must be a non-empty list of {id, sortId, parentId?, children?}.")
        return items


class MenuItemAdminForm(forms.ModelForm):
    """Admin change form. An empty position appends the item to its group."""

    sort_id = forms.IntegerField(
        required=False,
        help_text="Lower numbers appear first. Leave empty to append.",
    )

    class Meta:
        model = MenuItem
        fields = "__all__"
