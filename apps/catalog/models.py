"""Catalog models.

Dresses and jewelry are separate tables sharing an abstract base. Each
product keeps ``unavailable_dates``, a denormalized list of ``yyyy-MM-dd``
tokens covering every day already booked (plus manual admin blocks). The
booking commit is the only writer besides admins.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def derive_hint(name: str) -> str:
    """First two words of the name, lowercased. Used for image search hints."""
    return " ".join(name.lower().split()[:2])


class RentalProduct(models.Model):
    """Fields shared by every rentable product."""

    PRODUCT_TYPE: str = ""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Rental price per day."),
    )
    image_url = models.URLField(max_length=500, blank=True)
    images = models.JSONField(default=list, blank=True)
    hint = models.CharField(max_length=100, blank=True)
    availability = models.BooleanField(
        default=True,
        help_text=_("Master switch. When off the product cannot be booked at all."),
    )
    unavailable_dates = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Booked or manually blocked days as yyyy-MM-dd."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.hint:
            self.hint = derive_hint(self.name)
        if self.image_url and not self.images:
            self.images = [self.image_url]
        super().save(*args, **kwargs)

    @property
    def product_type(self) -> str:
        return self.PRODUCT_TYPE

    def set_image(self, image_url: str) -> None:
        self.image_url = image_url
        self.images = [image_url] if image_url else []

    def add_unavailable_dates(self, tokens) -> list:
        """Merge tokens into the index and return the ones that were new."""
        existing = set(self.unavailable_dates or [])
        added = sorted(set(tokens) - existing)
        self.unavailable_dates = sorted(existing | set(tokens))
        return added


class Dress(RentalProduct):
    PRODUCT_TYPE = "dresses"

    style = models.CharField(max_length=100, blank=True)
    related_products = models.ManyToManyField(
        "self",
        symmetrical=False,
        blank=True,
        related_name="related_to",
    )

    class Meta(RentalProduct.Meta):
        verbose_name = _("Dress")
        verbose_name_plural = _("Dresses")
        indexes = [models.Index(fields=["style"])]


class Jewelry(RentalProduct):
    PRODUCT_TYPE = "jewelry"

    jewelry_type = models.CharField(max_length=100, blank=True)

    class Meta(RentalProduct.Meta):
        verbose_name = _("Jewelry")
        verbose_name_plural = _("Jewelry")
        indexes = [models.Index(fields=["jewelry_type"])]


PRODUCT_MODELS = {
    Dress.PRODUCT_TYPE: Dress,
    Jewelry.PRODUCT_TYPE: Jewelry,
}

PRODUCT_TYPE_CHOICES = [
    (Dress.PRODUCT_TYPE, _("Dress")),
    (Jewelry.PRODUCT_TYPE, _("Jewelry")),
]


def product_model_for(product_type: str) -> type[RentalProduct]:
    """Resolve ``dresses``/``jewelry`` to its model, KeyError otherwise."""
    try:
        return PRODUCT_MODELS[product_type]
    except KeyError:
        raise KeyError(f"Unknown product type '{product_type}'") from None
