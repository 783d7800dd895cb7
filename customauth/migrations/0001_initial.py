import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(error_messages={"blank": "Please tell us your name!", "null": "Please tell us your name!"}, max_length=255)),
                ("email", models.EmailField(error_messages={"blank": "Please provide an email address!", "invalid": "Please provide a valid email!", "unique": "A user with that email already exists."}, max_length=254, unique=True)),
                ("photo", models.CharField(blank=True, max_length=255)),
                ("role", models.CharField(choices=[("user", "User"), ("guide", "Guide"), ("lead-guide", "Lead guide"), ("admin", "Admin")], default="user", max_length=16)),
                ("password", models.CharField(error_messages={"blank": "Please add a password for your account!"}, max_length=128)),
                ("password_changed_at", models.DateTimeField(blank=True, null=True)),
                ("password_reset_token", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("password_reset_expires", models.DateTimeField(blank=True, null=True)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
