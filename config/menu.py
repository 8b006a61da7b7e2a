from django.urls import reverse_lazy
from django.utils.functional import lazy
from django.utils.translation import gettext_lazy as _

from menus.choices import Domain

DOMAIN_ICONS = {
    Domain.ADMIN: "admin_panel_settings",
    Domain.WORKSHOP: "construction",
}


def changelist(model_label: str):
    """Admin changelist url for "app_label.modelname" (lowercase model name)."""
    app_label, model = model_label.split(".")
    return reverse_lazy(f"admin:{app_label}_{model}_changelist")


def _domain_changelist(domain) -> str:
    return f"{changelist('menus.menuitem')}?domain__exact={domain}"


domain_changelist = lazy(_domain_changelist, str)


UNFOLD = {
    "SITE_HEADER": "Navigational list",
    "SITE_TITLE": "Navigational list",
    "SITE_URL": "/navigational-list/",

    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": False,
        "navigation": [
            {
                "title": _("Menus"),
                "separator": True,
                "items": [
                    {"title": _("All menu items"), "icon": "menu", "link": changelist("menus.menuitem")},
                ]
                + [
                    {"title": domain.label, "icon": DOMAIN_ICONS[domain], "link": domain_changelist(domain.value)}
                    for domain in Domain
                ],
            },
            {
                "title": _("Access"),
                "collapsible": True,
                "items": [
                    {"title": _("Users"), "icon": "person", "link": changelist("auth.user")},
                    {"title": _("Groups"), "icon": "group", "link": changelist("auth.group")},
                ],
            },
        ],
    },
}
