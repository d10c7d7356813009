from __future__ import annotations

from django.db import models


class Junction(models.Model):
    objects = models.Manager["Junction"]()

    # Center-line Network Number of the intersection
    cnn = models.BigIntegerField(unique=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    streets = models.JSONField(default=list)
    adjacent = models.JSONField(default=list)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("cnn",)

    def __str__(self) -> str:
        return f"{self.cnn} ({' & '.join(self.streets)})"


class StreetAddress(models.Model):
    objects = models.Manager["StreetAddress"]()

    number = models.CharField(max_length=20)
    street = models.CharField(max_length=100)
    latitude = models.FloatField()
    longitude = models.FloatField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("street", "number")
        constraints = (
            models.UniqueConstraint(fields=["street", "number"], name="unique_street_address"),
        )
        indexes = (models.Index(fields=["street"], name="street_address_street_idx"),)

    @property
    def full_address(self) -> str:
        return f"{self.number} {self.street}"

    def __str__(self) -> str:
        return self.full_address


class School(models.Model):
    objects = models.Manager["School"]()

    name = models.CharField(max_length=255)
    types = models.JSONField(default=list)
    address = models.CharField(max_length=255)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)
        constraints = (
            models.UniqueConstraint(fields=["name", "address"], name="unique_school_address"),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.address})"
