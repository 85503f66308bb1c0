import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("documents", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DocumentNumberSequence",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "document_type",
                    models.CharField(
                        choices=[
                            ("quotation", "Quotation"),
                            ("sales_order", "Sales Order"),
                            ("invoice", "Invoice"),
                            ("delivery_note", "Delivery Note"),
                        ],
                        max_length=20,
                    ),
                ),
                ("year", models.PositiveIntegerField()),
                ("last_number", models.PositiveIntegerField(default=1000)),
            ],
            options={
                "db_table": "document_number_sequences",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("document_type", "year"),
                        name="document_number_sequences_type_year_uniq",
                    )
                ],
            },
        ),
    ]
