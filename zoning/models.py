from __future__ import annotations

from django.db import models


class StateBlob(models.Model):
    """Arbitrary JSON document stored under a string key."""

    key = models.SlugField(
        max_length=100,
        unique=True,
        help_text="Identifier the document is stored and looked up under.",
    )
    payload = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return self.key
