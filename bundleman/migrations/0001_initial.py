import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("seller_id", models.CharField(db_index=True, max_length=64, verbose_name="seller")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                (
                    "unit_price_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="Unit price in cents",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="unit price",
                    ),
                ),
                ("available_quantity", models.PositiveIntegerField(default=0, verbose_name="available quantity")),
                ("images", models.JSONField(blank=True, default=list, verbose_name="images")),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        db_index=True,
                        default="active",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "listing",
                "verbose_name_plural": "listings",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Bundle",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("seller_id", models.CharField(db_index=True, max_length=64, verbose_name="seller")),
                ("title", models.CharField(max_length=100, verbose_name="title")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "discount_driver",
                    models.CharField(
                        choices=[("none", "No discount"), ("amount", "Fixed amount"), ("percentage", "Percentage")],
                        default="none",
                        max_length=20,
                        verbose_name="discount driver",
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Percentage or currency amount, depending on the driver",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="discount value",
                    ),
                ),
                (
                    "effective_price_q",
                    models.BigIntegerField(default=0, help_text="Price after discount, in cents", verbose_name="effective price"),
                ),
                (
                    "discount_amount_q",
                    models.BigIntegerField(default=0, help_text="Discount in cents", verbose_name="discount amount"),
                ),
                (
                    "discount_percentage",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        max_digits=7,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                        verbose_name="discount percentage",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("version", models.PositiveIntegerField(default=1, verbose_name="version")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "bundle",
                "verbose_name_plural": "bundles",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["seller_id", "is_active"], name="bundle_seller_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="BundleItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("listing_id", models.CharField(max_length=64, verbose_name="listing")),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="quantity",
                    ),
                ),
                ("position", models.PositiveIntegerField(default=0, verbose_name="position")),
                (
                    "bundle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="bundleman.bundle",
                        verbose_name="bundle",
                    ),
                ),
            ],
            options={
                "verbose_name": "bundle item",
                "verbose_name_plural": "bundle items",
                "ordering": ["bundle", "position"],
                "constraints": [
                    models.UniqueConstraint(fields=("bundle", "listing_id"), name="unique_bundle_listing"),
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalBundle",
            fields=[
                ("id", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False)),
                ("seller_id", models.CharField(db_index=True, max_length=64, verbose_name="seller")),
                ("title", models.CharField(max_length=100, verbose_name="title")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "discount_driver",
                    models.CharField(
                        choices=[("none", "No discount"), ("amount", "Fixed amount"), ("percentage", "Percentage")],
                        default="none",
                        max_length=20,
                        verbose_name="discount driver",
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Percentage or currency amount, depending on the driver",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="discount value",
                    ),
                ),
                (
                    "effective_price_q",
                    models.BigIntegerField(default=0, help_text="Price after discount, in cents", verbose_name="effective price"),
                ),
                (
                    "discount_amount_q",
                    models.BigIntegerField(default=0, help_text="Discount in cents", verbose_name="discount amount"),
                ),
                (
                    "discount_percentage",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        max_digits=7,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                        verbose_name="discount percentage",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("version", models.PositiveIntegerField(default=1, verbose_name="version")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="created at")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical bundle",
                "verbose_name_plural": "historical bundles",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
