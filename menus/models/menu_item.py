from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords

from menus.choices import Domain, State, StructuralSubtype


class MenuItem(models.Model):
    """One entry of a navigational list.

    Items are ordered inside their *sibling group*: the items sharing
    (domain, structural_subtype, state, parent). Within a group sort_id runs
    1..N without gaps. Keeping it that way is the job of
    menus.services.resequencing; do not write sort_id directly.
    """

    Domain = Domain
    StructuralSubtype = StructuralSubtype
    State = State

    menu_item_text = models.CharField(max_length=255)
    route_path = models.CharField(max_length=500)
    tooltip_text = models.CharField(max_length=500, blank=True, default="")
    nav_svg_path = models.CharField(max_length=500, blank=True, default="")
    header_svg_path = models.CharField(max_length=500, blank=True, default="")
    auth_required = models.BooleanField(default=False)
    description = models.CharField(max_length=500, blank=True, default="No description provided")

    # partition key
    domain = models.CharField(max_length=20, choices=Domain.choices)
    structural_subtype = models.CharField(max_length=20, choices=StructuralSubtype.choices)
    state = models.CharField(max_length=20, choices=State.choices)

    # top-level items use parent=NULL
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.CASCADE,
    )
    sort_id = models.PositiveIntegerField(default=1)

    archived = models.BooleanField(default=False, db_index=True)
    version = models.PositiveIntegerField(default=1)
    last_updated = models.DateTimeField(default=timezone.now)

    history = HistoricalRecords()

    class Meta:
        ordering = ["domain", "structural_subtype", "state", "sort_id", "id"]
        indexes = [
            models.Index(
                fields=["domain", "structural_subtype", "state", "sort_id"],
                name="menuitem_partition_sort_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["domain", "structural_subtype", "state", "route_path"],
                name="menuitem_unique_route_per_partition",
            ),
        ]

    def __str__(self):
        return f"{self.menu_item_text} ({self.domain}/{self.structural_subtype}/{self.state} #{self.sort_id})"

    @property
    def partition(self):
        return (self.domain, self.structural_subtype, self.state)

    def touch(self):
        """Bump version and timestamp; caller saves."""
        self.version = (self.version or 0) + 1
        self.last_updated = timezone.now()
