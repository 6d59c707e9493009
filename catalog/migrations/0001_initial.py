import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProductRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("original_id", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("original_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("image_url", models.CharField(blank=True, max_length=500, null=True)),
                ("image_urls", models.JSONField(blank=True, default=list)),
                ("video_urls", models.JSONField(blank=True, default=list)),
                ("media_items", models.JSONField(blank=True, default=list)),
                ("features", models.JSONField(blank=True, default=list)),
                ("description", models.TextField(blank=True, null=True)),
                ("whatsapp_link", models.CharField(max_length=500)),
                ("category", models.CharField(db_index=True, max_length=120)),
                ("is_new", models.BooleanField(default=False)),
                ("is_featured", models.BooleanField(default=False)),
                ("is_hidden", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "products",
                "ordering": ("-created_at",),
            },
        ),
    ]
