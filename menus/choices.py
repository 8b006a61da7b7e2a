"""Closed enumerations that partition menu items.

Kept out of menus.models: config.settings imports this module (admin
sidebar) before the app registry is ready.
"""

from django.db import models


class Domain(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    WORKSHOP = "WORKSHOP", "Workshop"


class StructuralSubtype(models.TextChoices):
    HEADER = "HEADER", "Header"
    NAV = "NAV", "Nav"
    FOOTER = "FOOTER", "Footer"


class State(models.TextChoices):
    FULL = "FULL", "Full"
    RELAXED = "RELAXED", "Relaxed"
    COMPACT = "COMPACT", "Compact"
