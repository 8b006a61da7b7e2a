from .menu_items import MenuItemService
from .resequencing import KEEP_PARENT, MenuResequencer, ReorderNode
from .sibling_groups import GroupKey, Partition, sibling_filter
from .store import UNSET, MenuItemStore
