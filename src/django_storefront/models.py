"""Django Storefront models.

Provides:
- CustomerProfile: Buyer role and affiliation (the pricing actor)
- Product / ProductVariant: Catalog with sparse role price overrides
- Order / OrderItem: Checkout aggregate, lines snapshot resolved prices
- Fulfillment: Production and hand-off tracking for an order
- Payment: Individual payment records; Order.payment_status aggregates them
- OrderStatusLog: Append-only history of accepted status changes
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .choices import (
    ORDER_PROGRESS_STEPS,
    Affiliation,
    CancellationReason,
    FulfillmentStatus,
    OrderStatus,
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
    Role,
)
from .exceptions import ImmutableOrderItemError


# =============================================================================
# Base Models
# =============================================================================

class SoftDeleteManager(models.Manager):
    """Manager that excludes soft-deleted objects by default."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class StorefrontBaseModel(models.Model):
    """Base model with timestamps and soft delete.

    Storefront records are never physically removed through delete();
    use hard_delete() when a row really has to go.
    """

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)
    deleted_at = models.DateTimeField(_('deleted at'), null=True, blank=True)

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def delete(self, using=None, keep_parents=False):
        """Soft delete the object by setting deleted_at timestamp."""
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])

    def hard_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# =============================================================================
# CustomerProfile - Pricing Actor
# =============================================================================

class CustomerProfile(StorefrontBaseModel):
    """Role and affiliation of a shop account.

    Both fields may be empty for anonymous or unconfigured buyers, in
    which case no role override is ever applied. Accounts are marked
    inactive rather than deleted.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='storefront_profile',
        verbose_name=_('user'),
    )
    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        null=True,
        blank=True,
    )
    affiliation = models.CharField(
        _('affiliation'),
        max_length=20,
        choices=Affiliation.choices,
        null=True,
        blank=True,
        help_text=_('College used to decide whether role pricing applies'),
    )
    is_active = models.BooleanField(_('active'), default=True)

    class Meta:
        verbose_name = _('customer profile')
        verbose_name_plural = _('customer profiles')

    def __str__(self):
        return f'{self.user} ({self.role or "-"}/{self.affiliation or "-"})'


# =============================================================================
# Catalog
# =============================================================================

class Product(StorefrontBaseModel):
    """A merchandise listing posted by a staff account.

    The poster's affiliation is the "home" college for role pricing.
    `price` is only used when the product has no variants.
    """

    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='storefront_products',
        verbose_name=_('posted by'),
    )
    title = models.CharField(_('title'), max_length=200)
    slug = models.SlugField(_('slug'), max_length=200, unique=True)
    description = models.TextField(_('description'), blank=True)
    price = models.DecimalField(
        _('price'),
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
    )
    is_active = models.BooleanField(_('active'), default=True, db_index=True)

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['title']
        constraints = [
            models.CheckConstraint(
                condition=Q(price__isnull=True) | Q(price__gte=0),
                name='storefront_product_price_non_negative',
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def owner_affiliation(self):
        """Affiliation of the posting account, None if it has no profile."""
        profile = getattr(self.posted_by, 'storefront_profile', None)
        if profile is None:
            return None
        return profile.affiliation or None


class ProductVariant(StorefrontBaseModel):
    """A purchasable unit of a product.

    role_pricing is a sparse mapping of Role value -> override price, e.g.
    {"STUDENT": 400, "OTHERS": 450}. Missing keys mean no override.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='variants',
        verbose_name=_('product'),
    )
    name = models.CharField(_('name'), max_length=100)
    size = models.CharField(_('size'), max_length=20, blank=True)
    price = models.DecimalField(
        _('base price'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    role_pricing = models.JSONField(_('role pricing'), default=dict, blank=True)
    inventory = models.PositiveIntegerField(_('inventory'), default=0)

    class Meta:
        verbose_name = _('product variant')
        verbose_name_plural = _('product variants')
        ordering = ['product', 'price']
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name='storefront_variant_price_non_negative',
            ),
        ]

    def __str__(self):
        return f'{self.product.title} - {self.name}'


# =============================================================================
# Order Aggregate
# =============================================================================

class Order(StorefrontBaseModel):
    """Order header created at checkout.

    status, payment_status and cancellation_reason change only through
    django_storefront.services; total_amount is derived from the lines.
    """

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='storefront_orders',
        verbose_name=_('customer'),
    )
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='processed_storefront_orders',
        verbose_name=_('processed by'),
    )
    order_date = models.DateTimeField(_('order date'), default=timezone.now)
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )
    payment_status = models.CharField(
        _('payment status'),
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    cancellation_reason = models.CharField(
        _('cancellation reason'),
        max_length=20,
        choices=CancellationReason.choices,
        null=True,
        blank=True,
    )
    total_amount = models.DecimalField(
        _('total amount'), max_digits=12, decimal_places=2, default=Decimal('0'),
    )
    discount_amount = models.DecimalField(
        _('discount amount'), max_digits=12, decimal_places=2, default=Decimal('0'),
    )
    estimated_delivery = models.DateField(_('estimated delivery'), null=True, blank=True)

    class Meta:
        verbose_name = _('order')
        verbose_name_plural = _('orders')
        ordering = ['-order_date']
        indexes = [
            models.Index(fields=['customer', 'status'], name='storefront_order_cust_stat_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status=OrderStatus.CANCELLED, cancellation_reason__isnull=False)
                    & ~Q(cancellation_reason='')
                ) | (
                    ~Q(status=OrderStatus.CANCELLED) & Q(cancellation_reason__isnull=True)
                ),
                name='storefront_order_reason_iff_cancelled',
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0) & Q(discount_amount__gte=0),
                name='storefront_order_amounts_non_negative',
            ),
        ]

    def __str__(self):
        return f'Order {self.pk} ({self.status})'

    @property
    def progress_step(self) -> int:
        return ORDER_PROGRESS_STEPS.get(self.status, 0)


class OrderItemQuerySet(models.QuerySet):
    """Queryset that refuses bulk writes to order lines."""

    def update(self, **kwargs):
        raise ImmutableOrderItemError("OrderItem records are immutable")


class OrderItem(models.Model):
    """Order line with the price resolved at checkout.

    price, original_price and applied_role are a permanent snapshot:
    later edits to the variant's pricing never reach this row, and the row
    itself refuses to be saved again once created. Bulk update() and
    bulk_update() through OrderItem.objects raise as well; only deletion
    cascades (and SET_NULL on a removed variant or product) still write.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('order'),
    )
    variant = models.ForeignKey(
        ProductVariant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items',
        verbose_name=_('variant'),
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items',
        verbose_name=_('product'),
    )
    quantity = models.PositiveIntegerField(_('quantity'), validators=[MinValueValidator(1)])
    price = models.DecimalField(_('unit price'), max_digits=10, decimal_places=2)
    original_price = models.DecimalField(_('original price'), max_digits=10, decimal_places=2)
    applied_role = models.CharField(
        _('applied role'),
        max_length=20,
        choices=Role.choices,
        default=Role.OTHERS,
    )
    size = models.CharField(_('size'), max_length=20, blank=True)
    customer_note = models.TextField(_('customer note'), blank=True)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    objects = OrderItemQuerySet.as_manager()

    class Meta:
        verbose_name = _('order item')
        verbose_name_plural = _('order items')
        ordering = ['created_at', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='storefront_orderitem_quantity_positive',
            ),
        ]

    def save(self, *args, **kwargs):
        # Immutable after creation
        if self.pk and OrderItem.objects.filter(pk=self.pk).exists():
            raise ImmutableOrderItemError("OrderItem records are immutable")
        super().save(*args, **kwargs)

    def __str__(self):
        return f'{self.quantity} x {self.variant or self.product} @ {self.price}'

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


# =============================================================================
# Fulfillment / Payment
# =============================================================================

class Fulfillment(StorefrontBaseModel):
    """Physical production and hand-off state of an order."""

    order = models.OneToOneField(
        Order,
        on_delete=models.CASCADE,
        related_name='fulfillment',
        verbose_name=_('order'),
    )
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=FulfillmentStatus.choices,
        default=FulfillmentStatus.PENDING,
        db_index=True,
    )
    started_at = models.DateTimeField(_('started at'), null=True, blank=True)
    completed_at = models.DateTimeField(_('completed at'), null=True, blank=True)

    class Meta:
        verbose_name = _('fulfillment')
        verbose_name_plural = _('fulfillments')

    def __str__(self):
        return f'Fulfillment for order {self.order_id} ({self.status})'


class Payment(StorefrontBaseModel):
    """A single payment made toward an order.

    Several partial payments may exist; Order.payment_status is derived
    from the completed ones.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name='payments',
        verbose_name=_('order'),
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='storefront_payments',
        verbose_name=_('customer'),
    )
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='processed_storefront_payments',
        verbose_name=_('processed by'),
    )
    payment_date = models.DateTimeField(_('payment date'), default=timezone.now)
    amount = models.DecimalField(
        _('amount'),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    method = models.CharField(_('method'), max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=PaymentRecordStatus.choices,
        default=PaymentRecordStatus.PENDING,
        db_index=True,
    )
    transaction_id = models.CharField(_('transaction id'), max_length=100, blank=True)
    reference_no = models.CharField(_('reference number'), max_length=100, blank=True)
    last4 = models.CharField(_('card last 4'), max_length=4, blank=True)

    class Meta:
        verbose_name = _('payment')
        verbose_name_plural = _('payments')
        ordering = ['-payment_date']

    def __str__(self):
        return f'{self.method} {self.amount} ({self.status})'


# =============================================================================
# OrderStatusLog - Append-only history
# =============================================================================

class OrderStatusLog(models.Model):
    """One accepted status change on an order, payment or fulfillment."""

    DIMENSION_CHOICES = [
        ('order', _('Order')),
        ('payment', _('Payment')),
        ('fulfillment', _('Fulfillment')),
    ]

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='status_logs',
        verbose_name=_('order'),
    )
    dimension = models.CharField(_('dimension'), max_length=20, choices=DIMENSION_CHOICES)
    status = models.CharField(_('status'), max_length=20)
    message = models.TextField(_('message'), blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='storefront_status_logs',
        verbose_name=_('created by'),
    )
    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _('order status log')
        verbose_name_plural = _('order status logs')
        ordering = ['created_at', 'pk']

    def save(self, *args, **kwargs):
        # Append-only
        if self.pk and OrderStatusLog.objects.filter(pk=self.pk).exists():
            raise ValueError("OrderStatusLog records are immutable")
        super().save(*args, **kwargs)

    def __str__(self):
        return f'{self.dimension}: {self.status} at {self.created_at}'
