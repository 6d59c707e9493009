import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WhatsAppNumber",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("whatsapp_number", models.CharField(db_index=True, max_length=20)),
                ("country_code", models.CharField(default="+234", max_length=6)),
                ("source_page", models.CharField(blank=True, max_length=300)),
                ("source_url", models.CharField(blank=True, max_length=1000)),
                ("user_agent", models.TextField(blank=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("browser_fingerprint", models.CharField(blank=True, max_length=32)),
                ("referrer", models.CharField(blank=True, default="direct", max_length=1000)),
                ("utm_source", models.CharField(blank=True, max_length=200, null=True)),
                ("utm_medium", models.CharField(blank=True, max_length=200, null=True)),
                ("utm_campaign", models.CharField(blank=True, max_length=200, null=True)),
                (
                    "device_type",
                    models.CharField(
                        choices=[("desktop", "Desktop"), ("mobile", "Mobile"), ("tablet", "Tablet")],
                        default="desktop",
                        max_length=10,
                    ),
                ),
                ("is_mobile", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "visitor_whatsapp_numbers",
                "ordering": ("-created_at",),
            },
        ),
    ]
