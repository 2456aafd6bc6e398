"""Base abstract models shared by the catalog modules.

Provides ``TimestampedModel``: integer primary key, an immutable
``created_at`` and an optional ``updated_at``.

Design decisions:
- ``updated_at`` is ``NULL`` until the first mutation after creation; it
  is stamped explicitly via ``touch()`` (or by conditional ``UPDATE``
  statements) rather than ``auto_now``, so a freshly created row reports
  no modification time.
- ``save()`` guard keeps ``updated_at`` in ``update_fields`` whenever it
  has been stamped, so partial saves never drop the new timestamp.
"""

from __future__ import annotations

from datetime import datetime

from django.db import models
from django.utils import timezone


class TimestampedModel(models.Model):
    """Abstract base with creation / modification bookkeeping."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        abstract = True

    def touch(self, when: datetime | None = None) -> datetime:
        """Stamp ``updated_at`` (never earlier than ``created_at``)."""
        now = when or timezone.now()
        if self.created_at is not None and now < self.created_at:
            now = self.created_at
        self.updated_at = now
        return now

    def save(self, *args, **kwargs) -> None:
        """Ensure a stamped ``updated_at`` survives ``update_fields`` saves."""
        update_fields = kwargs.get("update_fields")
        if (
            update_fields is not None
            and self.updated_at is not None
            and "updated_at" not in update_fields
        ):
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)
