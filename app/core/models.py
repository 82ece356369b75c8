"""
Abstract base models shared by every app.

Base Classes:
    BaseModel: created_at / updated_at maintained by Django on save
    UUIDPrimaryKeyMixin: UUID primary key instead of an integer
    VersionedModel: optimistic ``version`` counter bumped on every save

Usage:
    from core.models import BaseModel, UUIDPrimaryKeyMixin

    class Merchant(UUIDPrimaryKeyMixin, BaseModel):
        merchant_id = models.CharField(max_length=64, unique=True)

Note:
    Always list mixins before BaseModel in inheritance. Models whose writers
    own their timestamps (see payments.models.PaymentTransaction) declare
    their own timestamp fields and use VersionedModel alone.
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import F


class BaseModel(models.Model):
    """
    Abstract model with creation and modification timestamps.

    Fields:
        created_at: Set when the row is first inserted
        updated_at: Refreshed on every save()
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.pk})"


class UUIDPrimaryKeyMixin(models.Model):
    """Use a random UUID as primary key (non-guessable in URLs and admin)."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class VersionedModel(models.Model):
    """
    Abstract model carrying an optimistic locking counter.

    Every save() of an existing row increments ``version`` in the database
    with an F() expression, so two writers that both loaded version N
    produce N+1 and N+2 instead of silently overwriting each other's bump.
    Writers that need to detect a concurrent change compare the version
    they loaded with the one they see under ``select_for_update()``.

    Writes that go through ``QuerySet.update()`` do not bump the version;
    that path is reserved for touching bookkeeping columns only.
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        is_update = not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])
