from django.core.management.base import BaseCommand

from menus.models import Domain
from menus.services import MenuItemService


class Command(BaseCommand):
    help = "Renumber every sibling group as 1..N (repairs gaps and duplicate sort ids)."

    def add_arguments(self, parser):
        parser.add_argument("--domain", choices=Domain.values, help="Only this domain")

    def handle(self, *args, **opts):
        changed = MenuItemService().resequence(domain=opts["domain"])
        self.stdout.write(self.style.SUCCESS(f"Re-sequenced menu items: renumbered={changed}"))
