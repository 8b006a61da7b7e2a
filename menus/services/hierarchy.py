from __future__ import annotations

from django.db.models import Q

from menus.services.store import MenuItemStore

HIERARCHY_ORDER = ("structural_subtype", "state", "sort_id", "id")


def build_hierarchy(domain, include_archived=False, store=None) -> dict:
    """Group a domain's items as {structural_subtype: {state: [items]}}.

    Leaf lists keep the scan order (structural_subtype, state, sort_id).
    Read only.
    """
    store = store or MenuItemStore()

    q = Q(domain=domain)
    if not include_archived:
        q &= Q(archived=False)

    hierarchy: dict = {}
    for item in store.scan(q, order_by=HIERARCHY_ORDER):
        hierarchy.setdefault(item.structural_subtype, {}).setdefault(item.state, []).append(item)
    return hierarchy


def hierarchy_payload(domain, hierarchy: dict, serialize) -> dict:
    """Wire shape: {"domain": D, "structuralSubtypes": {S: {"states": {T: [...]}}}}."""
    return {
        "domain": domain,
        "structuralSubtypes": {
            subtype: {"states": {state: [serialize(i) for i in items] for state, items in states.items()}}
            for subtype, states in hierarchy.items()
        },
    }


def flatten_hierarchy(hierarchy: dict) -> list:
    return [item for states in hierarchy.values() for items in states.values() for item in items]
