"""camelCase wire format of a menu item, as consumed by the front end."""

# (wire name, model attribute)
WIRE_FIELDS = (
    ("menuItemText", "menu_item_text"),
    ("routePath", "route_path"),
    ("tooltipText", "tooltip_text"),
    ("navSvgPath", "nav_svg_path"),
    ("headerSvgPath", "header_svg_path"),
    ("sortId", "sort_id"),
    ("authRequired", "auth_required"),
    ("domain", "domain"),
    ("structuralSubtype", "structural_subtype"),
    ("state", "state"),
    ("description", "description"),
    ("archived", "archived"),
    ("parentId", "parent_id"),
)

TO_ATTR = dict(WIRE_FIELDS)


def serialize_menu_item(item) -> dict:
    data = {"id": item.pk}
    for wire, attr in WIRE_FIELDS:
        data[wire] = getattr(item, attr)
    data["version"] = item.version
    data["lastUpdated"] = item.last_updated.isoformat() if item.last_updated else None
    return data


def from_wire(payload: dict) -> dict:
    """Rename known wire keys to model attribute names; drop everything else."""
    return {TO_ATTR[k]: v for k, v in payload.items() if k in TO_ATTR}
