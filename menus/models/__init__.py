from .menu_item import MenuItem, Domain, StructuralSubtype, State
