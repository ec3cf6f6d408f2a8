import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("committee", models.CharField(max_length=255)),
                ("fee", models.PositiveIntegerField()),
                ("room", models.CharField(max_length=100)),
                ("link", models.SlugField(max_length=255, unique=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("STANDARD", "STANDARD"), ("FLASH", "FLASH")],
                        default="STANDARD",
                        max_length=16,
                    ),
                ),
                ("registration_refs", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("participant_name", models.CharField(max_length=255)),
                ("college_name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(max_length=10)),
                ("event_refs", models.JSONField(default=list)),
                ("amount_paid", models.IntegerField()),
                ("payment_mode", models.CharField(choices=[("CASH", "CASH"), ("UPI", "UPI")], max_length=8)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["-created_at"], name="registration_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="ServiceRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("client_name", models.CharField(max_length=255)),
                ("services", models.JSONField(default=list)),
                ("payment_mode", models.CharField(choices=[("CASH", "CASH"), ("UPI", "UPI")], max_length=8)),
                ("total", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Setting",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("value", models.CharField(max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
    ]
