from __future__ import annotations

from typing import NamedTuple, Optional

from django.db.models import Q

from menus.models import Domain, State, StructuralSubtype


class Partition(NamedTuple):
    domain: str
    structural_subtype: str
    state: str

    @classmethod
    def parse(cls, domain, structural_subtype, state) -> "Partition":
        """Build a partition from raw values, rejecting anything outside the enumerations."""
        for value, choices, label in (
            (domain, Domain, "domain"),
            (structural_subtype, StructuralSubtype, "structuralSubtype"),
            (state, State, "state"),
        ):
            if value not in choices.values:
                raise ValueError(f"Invalid {label}: {value!r}")
        return cls(str(domain), str(structural_subtype), str(state))

    def as_filter(self) -> Q:
        return Q(domain=self.domain, structural_subtype=self.structural_subtype, state=self.state)


class GroupKey(NamedTuple):
    """Identity of a sibling group. parent_id=None is the root group of the partition."""

    domain: str
    structural_subtype: str
    state: str
    parent_id: Optional[int]

    @classmethod
    def of(cls, item) -> "GroupKey":
        return cls(item.domain, item.structural_subtype, item.state, item.parent_id)

    @property
    def partition(self) -> Partition:
        return Partition(self.domain, self.structural_subtype, self.state)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


def sibling_filter(key: GroupKey, exclude_id=None) -> Q:
    """Q selecting the members of the group `key`, minus `exclude_id`.

    Root groups are matched by parent IS NULL, never by a concrete value.
    """
    q = key.partition.as_filter()
    if key.is_root:
        q &= Q(parent__isnull=True)
    else:
        q &= Q(parent_id=key.parent_id)
    if exclude_id is not None:
        q &= ~Q(pk=exclude_id)
    return q
