from .menu_forms import DEFAULT_DESCRIPTION, MenuItemAdminForm, MenuItemForm, MoveForm, ReorderForm, ReorderTreeForm
