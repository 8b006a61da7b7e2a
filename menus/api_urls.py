from django.urls import path

from . import api_views

app_name = "menus"

urlpatterns = [
    path("", api_views.menu_items, name="api-menu-items"),
    path("hierarchy/<str:domain>/", api_views.menu_hierarchy, name="api-menu-hierarchy"),
    path("domain/<str:domain>/", api_views.menu_items_by_group, name="api-menu-domain"),
    path(
        "domain/<str:domain>/structural-subtype/<str:structural_subtype>/",
        api_views.menu_items_by_group,
        name="api-menu-domain-subtype",
    ),
    path(
        "domain/<str:domain>/structural-subtype/<str:structural_subtype>/state/<str:state>/",
        api_views.menu_items_by_group,
        name="api-menu-domain-subtype-state",
    ),
    path("sort/<int:pk>/", api_views.menu_item_move, name="api-menu-move"),
    path(
        "reorder/<str:domain>/<str:structural_subtype>/<str:state>/",
        api_views.menu_reorder,
        name="api-menu-reorder",
    ),
    path(
        "reorder-tree/<str:domain>/<str:structural_subtype>/<str:state>/",
        api_views.menu_reorder_tree,
        name="api-menu-reorder-tree",
    ),
    path("<int:pk>/", api_views.menu_item_detail, name="api-menu-item"),
    path("<int:pk>/archive/", api_views.menu_item_archive, name="api-menu-archive"),
    path("<int:pk>/unarchive/", api_views.menu_item_unarchive, name="api-menu-unarchive"),
]
