import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tour",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(error_messages={"blank": "A tour must have a name", "null": "A tour must have a name", "unique": "A tour with that name already exists."}, max_length=255, unique=True, validators=[django.core.validators.MinLengthValidator(10, "A tour name must have more or equal than 10 characters"), django.core.validators.MaxLengthValidator(40, "A tour name must have less or equal than 40 characters")])),
                ("slug", models.SlugField(blank=True, max_length=255)),
                ("duration", models.PositiveIntegerField(error_messages={"null": "A tour must have a duration"})),
                ("max_group_size", models.PositiveIntegerField(error_messages={"null": "A tour must have a group size"})),
                ("difficulty", models.CharField(choices=[("easy", "Easy"), ("medium", "Medium"), ("difficult", "Difficult")], error_messages={"blank": "A tour must have a difficulty", "invalid_choice": "Difficulty is either: easy, medium, difficult", "null": "A tour must have a difficulty"}, max_length=16)),
                ("ratings_average", models.FloatField(default=4.5, validators=[django.core.validators.MinValueValidator(1, "Rating must be above 1.0"), django.core.validators.MaxValueValidator(5, "Rating must be below 5.0")])),
                ("ratings_quantity", models.PositiveIntegerField(default=0)),
                ("price", models.FloatField(error_messages={"null": "A tour must have a price"})),
                ("price_discount", models.FloatField(blank=True, null=True)),
                ("summary", models.TextField(error_messages={"blank": "A tour must have a summary", "null": "A tour must have a summary"})),
                ("description", models.TextField(blank=True)),
                ("image_cover", models.CharField(error_messages={"blank": "A tour must have a cover image", "null": "A tour must have a cover image"}, max_length=255)),
                ("images", models.JSONField(blank=True, default=list)),
                ("start_dates", models.JSONField(blank=True, default=list)),
                ("secret_tour", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-ratings_average"],
            },
        ),
    ]
