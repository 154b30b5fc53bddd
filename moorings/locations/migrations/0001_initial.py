from django.db import migrations
from django.db import models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MooringLocation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("address", models.CharField(max_length=255)),
                ("county", models.CharField(max_length=100)),
                ("region", models.CharField(max_length=100)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("pier", "Pier"),
                            ("jetty", "Jetty"),
                            ("marina", "Marina"),
                        ],
                        max_length=16,
                    ),
                ),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                (
                    "capacity",
                    models.PositiveIntegerField(help_text="Number of berths."),
                ),
                ("depth", models.FloatField(help_text="Depth in meters.")),
                ("has_fuel", models.BooleanField(default=False)),
                ("has_water", models.BooleanField(default=False)),
                ("has_electricity", models.BooleanField(default=False)),
                ("has_waste_disposal", models.BooleanField(default=False)),
                ("has_showers", models.BooleanField(default=False)),
                ("has_restaurant", models.BooleanField(default=False)),
                ("has_wifi", models.BooleanField(default=False)),
                ("has_laundry", models.BooleanField(default=False)),
                ("has_parking", models.BooleanField(default=False)),
                (
                    "phone",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("website", models.URLField(blank=True, null=True)),
                ("description", models.TextField(blank=True, null=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
