# Generated manually for standalone django-storefront package

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


ROLE_CHOICES = [
    ("PLAYER", "Player"),
    ("STUDENT", "Student"),
    ("STAFF_FACULTY", "Staff / Faculty"),
    ("ALUMNI", "Alumni"),
    ("OTHERS", "Others"),
]

AFFILIATION_CHOICES = [
    ("CAS", "College of Arts and Sciences"),
    ("CBA", "College of Business Administration"),
    ("CCS", "College of Computing Studies"),
    ("CED", "College of Education"),
    ("COE", "College of Engineering"),
    ("CON", "College of Nursing"),
    ("CHTM", "College of Hospitality and Tourism Management"),
    ("NOT_APPLICABLE", "Not Applicable"),
]

ORDER_STATUS_CHOICES = [
    ("PENDING", "Order Received"),
    ("PROCESSING", "In Processing"),
    ("READY", "Ready for Delivery"),
    ("DELIVERED", "Delivered"),
    ("CANCELLED", "Cancelled"),
]

PAYMENT_STATUS_CHOICES = [
    ("PENDING", "Payment Pending"),
    ("DOWNPAYMENT", "Down Payment Received"),
    ("PAID", "Fully Paid"),
    ("REFUNDED", "Refunded"),
]

FULFILLMENT_STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("PRODUCTION", "In Production"),
    ("READY", "Ready"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]

CANCELLATION_REASON_CHOICES = [
    ("OUT_OF_STOCK", "Out of stock"),
    ("CUSTOMER_REQUEST", "Customer request"),
    ("PAYMENT_FAILED", "Payment failed"),
    ("OTHERS", "Others"),
]

PAYMENT_RECORD_STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("PROCESSING", "Processing"),
    ("COMPLETED", "Completed"),
    ("FAILED", "Failed"),
    ("REFUNDED", "Refunded"),
]

PAYMENT_METHOD_CHOICES = [
    ("CREDIT_CARD", "Credit Card"),
    ("DEBIT_CARD", "Debit Card"),
    ("PAYPAL", "PayPal"),
    ("BANK_TRANSFER", "Bank Transfer"),
    ("CASH", "Cash"),
]


def _timestamps():
    return [
        ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
        ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
        ("deleted_at", models.DateTimeField(blank=True, null=True, verbose_name="deleted at")),
    ]


def _pk():
    return (
        "id",
        models.BigAutoField(
            auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
        ),
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomerProfile",
            fields=[
                _pk(),
                *_timestamps(),
                (
                    "role",
                    models.CharField(
                        blank=True, choices=ROLE_CHOICES, max_length=20, null=True,
                        verbose_name="role",
                    ),
                ),
                (
                    "affiliation",
                    models.CharField(
                        blank=True, choices=AFFILIATION_CHOICES,
                        help_text="College used to decide whether role pricing applies",
                        max_length=20, null=True, verbose_name="affiliation",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="storefront_profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "customer profile",
                "verbose_name_plural": "customer profiles",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                _pk(),
                *_timestamps(),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                ("slug", models.SlugField(max_length=200, unique=True, verbose_name="slug")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="price",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="active"),
                ),
                (
                    "posted_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="storefront_products",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="posted by",
                    ),
                ),
            ],
            options={
                "verbose_name": "product",
                "verbose_name_plural": "products",
                "ordering": ["title"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__isnull=True) | models.Q(price__gte=0),
                        name="storefront_product_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductVariant",
            fields=[
                _pk(),
                *_timestamps(),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                ("size", models.CharField(blank=True, max_length=20, verbose_name="size")),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2, max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="base price",
                    ),
                ),
                (
                    "role_pricing",
                    models.JSONField(blank=True, default=dict, verbose_name="role pricing"),
                ),
                (
                    "inventory",
                    models.PositiveIntegerField(default=0, verbose_name="inventory"),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variants",
                        to="django_storefront.product",
                        verbose_name="product",
                    ),
                ),
            ],
            options={
                "verbose_name": "product variant",
                "verbose_name_plural": "product variants",
                "ordering": ["product", "price"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gte=0),
                        name="storefront_variant_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                _pk(),
                *_timestamps(),
                (
                    "order_date",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="order date"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES, db_index=True, default="PENDING",
                        max_length=20, verbose_name="status",
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=PAYMENT_STATUS_CHOICES, db_index=True, default="PENDING",
                        max_length=20, verbose_name="payment status",
                    ),
                ),
                (
                    "cancellation_reason",
                    models.CharField(
                        blank=True, choices=CANCELLATION_REASON_CHOICES, max_length=20,
                        null=True, verbose_name="cancellation reason",
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12,
                        verbose_name="total amount",
                    ),
                ),
                (
                    "discount_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12,
                        verbose_name="discount amount",
                    ),
                ),
                (
                    "estimated_delivery",
                    models.DateField(blank=True, null=True, verbose_name="estimated delivery"),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="storefront_orders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="customer",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True, null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_storefront_orders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="processed by",
                    ),
                ),
            ],
            options={
                "verbose_name": "order",
                "verbose_name_plural": "orders",
                "ordering": ["-order_date"],
                "indexes": [
                    models.Index(
                        fields=["customer", "status"], name="storefront_order_cust_stat_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(status="CANCELLED", cancellation_reason__isnull=False)
                            & ~models.Q(cancellation_reason="")
                        ) | (
                            ~models.Q(status="CANCELLED")
                            & models.Q(cancellation_reason__isnull=True)
                        ),
                        name="storefront_order_reason_iff_cancelled",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=0) & models.Q(discount_amount__gte=0),
                        name="storefront_order_amounts_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                _pk(),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="quantity",
                    ),
                ),
                (
                    "price",
                    models.DecimalField(decimal_places=2, max_digits=10, verbose_name="unit price"),
                ),
                (
                    "original_price",
                    models.DecimalField(
                        decimal_places=2, max_digits=10, verbose_name="original price"
                    ),
                ),
                (
                    "applied_role",
                    models.CharField(
                        choices=ROLE_CHOICES, default="OTHERS", max_length=20,
                        verbose_name="applied role",
                    ),
                ),
                ("size", models.CharField(blank=True, max_length=20, verbose_name="size")),
                ("customer_note", models.TextField(blank=True, verbose_name="customer note")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="django_storefront.order",
                        verbose_name="order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True, null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="django_storefront.product",
                        verbose_name="product",
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        blank=True, null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="django_storefront.productvariant",
                        verbose_name="variant",
                    ),
                ),
            ],
            options={
                "verbose_name": "order item",
                "verbose_name_plural": "order items",
                "ordering": ["created_at", "pk"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=1),
                        name="storefront_orderitem_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Fulfillment",
            fields=[
                _pk(),
                *_timestamps(),
                (
                    "status",
                    models.CharField(
                        choices=FULFILLMENT_STATUS_CHOICES, db_index=True, default="PENDING",
                        max_length=20, verbose_name="status",
                    ),
                ),
                (
                    "started_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="started at"),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="completed at"),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fulfillment",
                        to="django_storefront.order",
                        verbose_name="order",
                    ),
                ),
            ],
            options={
                "verbose_name": "fulfillment",
                "verbose_name_plural": "fulfillments",
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                _pk(),
                *_timestamps(),
                (
                    "payment_date",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="payment date"
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2, max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                        verbose_name="amount",
                    ),
                ),
                (
                    "method",
                    models.CharField(
                        choices=PAYMENT_METHOD_CHOICES, max_length=20, verbose_name="method"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=PAYMENT_RECORD_STATUS_CHOICES, db_index=True,
                        default="PENDING", max_length=20, verbose_name="status",
                    ),
                ),
                (
                    "transaction_id",
                    models.CharField(blank=True, max_length=100, verbose_name="transaction id"),
                ),
                (
                    "reference_no",
                    models.CharField(blank=True, max_length=100, verbose_name="reference number"),
                ),
                ("last4", models.CharField(blank=True, max_length=4, verbose_name="card last 4")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="storefront_payments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="customer",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="django_storefront.order",
                        verbose_name="order",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True, null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_storefront_payments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="processed by",
                    ),
                ),
            ],
            options={
                "verbose_name": "payment",
                "verbose_name_plural": "payments",
                "ordering": ["-payment_date"],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusLog",
            fields=[
                _pk(),
                (
                    "dimension",
                    models.CharField(
                        choices=[
                            ("order", "Order"),
                            ("payment", "Payment"),
                            ("fulfillment", "Fulfillment"),
                        ],
                        max_length=20,
                        verbose_name="dimension",
                    ),
                ),
                ("status", models.CharField(max_length=20, verbose_name="status")),
                ("message", models.TextField(blank=True, verbose_name="message")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True, null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="storefront_status_logs",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="created by",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_logs",
                        to="django_storefront.order",
                        verbose_name="order",
                    ),
                ),
            ],
            options={
                "verbose_name": "order status log",
                "verbose_name_plural": "order status logs",
                "ordering": ["created_at", "pk"],
            },
        ),
    ]
