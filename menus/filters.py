import django_filters

from menus.models import Domain, MenuItem, State, StructuralSubtype


class MenuItemFilter(django_filters.FilterSet):
    """Query-string filters of the list endpoint (wire names)."""

    domain = django_filters.ChoiceFilter(choices=Domain.choices)
    structuralSubtype = django_filters.ChoiceFilter(field_name="structural_subtype", choices=StructuralSubtype.choices)
    state = django_filters.ChoiceFilter(choices=State.choices)
    archived = django_filters.BooleanFilter()
    authRequired = django_filters.BooleanFilter(field_name="auth_required")

    class Meta:
        model = MenuItem
        fields = []
