import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.text import slugify


def _is_iso_date(value):
    if not isinstance(value, str):
        return False
    try:
        return bool(parse_datetime(value) or parse_date(value))
    except ValueError:
        return False


class TourQuerySet(models.QuerySet):
    def visible(self):
        """
        Secret tours never show up in listings or lookups.
        """
        return self.filter(secret_tour=False)


class Tour(models.Model):
    class Difficulty(models.TextChoices):
        EASY = "easy", "Easy"
        MEDIUM = "medium", "Medium"
        DIFFICULT = "difficult", "Difficult"

    # JSON name -> model field
    API_FIELDS = {
        "maxGroupSize": "max_group_size",
        "ratingsAverage": "ratings_average",
        "ratingsQuantity": "ratings_quantity",
        "priceDiscount": "price_discount",
        "imageCover": "image_cover",
        "startDates": "start_dates",
        "secretTour": "secret_tour",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        unique=True,
        validators=[
            MinLengthValidator(10, "A tour name must have more or equal than 10 characters"),
            MaxLengthValidator(40, "A tour name must have less or equal than 40 characters"),
        ],
        error_messages={
            "blank": "A tour must have a name",
            "null": "A tour must have a name",
            "unique": "A tour with that name already exists.",
        },
    )
    slug = models.SlugField(max_length=255, blank=True)
    duration = models.PositiveIntegerField(
        error_messages={"null": "A tour must have a duration"},
    )
    max_group_size = models.PositiveIntegerField(
        error_messages={"null": "A tour must have a group size"},
    )
    difficulty = models.CharField(
        max_length=16,
        choices=Difficulty.choices,
        error_messages={
            "blank": "A tour must have a difficulty",
            "null": "A tour must have a difficulty",
            "invalid_choice": "Difficulty is either: easy, medium, difficult",
        },
    )
    ratings_average = models.FloatField(
        default=4.5,
        validators=[
            MinValueValidator(1, "Rating must be above 1.0"),
            MaxValueValidator(5, "Rating must be below 5.0"),
        ],
    )
    ratings_quantity = models.PositiveIntegerField(default=0)
    price = models.FloatField(
        error_messages={"null": "A tour must have a price"},
    )
    price_discount = models.FloatField(null=True, blank=True)
    summary = models.TextField(
        error_messages={"blank": "A tour must have a summary", "null": "A tour must have a summary"},
    )
    description = models.TextField(blank=True)
    image_cover = models.CharField(
        max_length=255,
        error_messages={"blank": "A tour must have a cover image", "null": "A tour must have a cover image"},
    )
    images = models.JSONField(default=list, blank=True)
    # ISO-8601 strings
    start_dates = models.JSONField(default=list, blank=True)
    secret_tour = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TourQuerySet.as_manager()

    class Meta:
        ordering = ["-ratings_average"]

    def __str__(self):
        return self.name

    @property
    def duration_weeks(self):
        if self.duration is None:
            return None
        return round(self.duration / 7, 1)

    def clean(self):
        self.name = (self.name or "").strip()
        self.summary = (self.summary or "").strip()
        self.description = (self.description or "").strip()

        errors = {}
        numbers = (int, float)
        if (
            isinstance(self.price_discount, numbers)
            and isinstance(self.price, numbers)
            and self.price_discount >= self.price
        ):
            errors["price_discount"] = [
                f"Discount price ({self.price_discount}) should be below regular price"
            ]

        if not isinstance(self.images, list) or not all(isinstance(i, str) for i in self.images):
            errors["images"] = ["Images must be a list of image names"]

        if not isinstance(self.start_dates, list) or not all(
            _is_iso_date(d) for d in self.start_dates
        ):
            errors["start_dates"] = ["Start dates must be a list of ISO-8601 dates"]

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.slug = slugify(self.name or "")
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "name" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"slug"}
        super().save(*args, **kwargs)
