# core/organization_models.py
from django.db import models


class Region(models.Model):
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Area(models.Model):
    """
    Group of branches supervised by one area manager.
    """
    name = models.CharField(max_length=100)
    region = models.ForeignKey(
        Region,
        on_delete=models.PROTECT,
        related_name="areas",
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ["name"]
        unique_together = [("region", "name")]

    def __str__(self):
        return self.name


class Branch(models.Model):
    name = models.CharField(max_length=150)
    code = models.CharField(max_length=20, unique=True)
    area = models.ForeignKey(
        Area,
        on_delete=models.PROTECT,
        related_name="branches",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "Branches"

    def __str__(self):
        return f"{self.name} — {self.code}"

    @property
    def region(self):
        return self.area.region if self.area_id else None
