import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Buyer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=80)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(max_length=15)),
                ("city", models.CharField(max_length=255)),
                (
                    "property_type",
                    models.CharField(
                        choices=[
                            ("Apartment", "Apartment"),
                            ("Villa", "Villa"),
                            ("Plot", "Plot"),
                            ("Office", "Office"),
                            ("Retail", "Retail"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "bhk",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("One", "One"),
                            ("Two", "Two"),
                            ("Three", "Three"),
                            ("Four", "Four"),
                            ("Studio", "Studio"),
                        ],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("purpose", models.CharField(choices=[("Buy", "Buy"), ("Rent", "Rent")], max_length=10)),
                (
                    "budget_min",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=14,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "budget_max",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=14,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "timeline",
                    models.CharField(
                        choices=[
                            ("0-3 months", "0-3 months"),
                            ("3-6 months", "3-6 months"),
                            (">6 months", ">6 months"),
                            ("Exploring", "Exploring"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("Website", "Website"),
                            ("Referral", "Referral"),
                            ("Walk-in", "Walk-in"),
                            ("Call", "Call"),
                            ("Other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("New", "New"),
                            ("Qualified", "Qualified"),
                            ("Contacted", "Contacted"),
                            ("Visited", "Visited"),
                            ("Negotiation", "Negotiation"),
                            ("Converted", "Converted"),
                            ("Dropped", "Dropped"),
                        ],
                        default="New",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True, max_length=1000, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="buyers",
                        to="authentication.useridentity",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["updated_at"], name="buyer_updated_at_idx"),
                    models.Index(fields=["city"], name="buyer_city_idx"),
                    models.Index(fields=["status"], name="buyer_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BuyerHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("diff", models.JSONField(default=dict)),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="histories",
                        to="buyers.buyer",
                    ),
                ),
                (
                    "changed_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="buyer_changes",
                        to="authentication.useridentity",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "buyer histories",
                "ordering": ["-changed_at", "-id"],
                "indexes": [
                    models.Index(fields=["buyer", "-changed_at"], name="buyer_history_recent_idx"),
                ],
            },
        ),
    ]
