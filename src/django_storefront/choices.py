"""Choice enumerations shared by storefront models, pricing and lifecycle.

Values are the upper-case labels used by the mobile client and stored in
ProductVariant.role_pricing keys, so they must not be renamed.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    """Buyer classification used to select a role price override."""

    PLAYER = "PLAYER", _("Player")
    STUDENT = "STUDENT", _("Student")
    STAFF_FACULTY = "STAFF_FACULTY", _("Staff / Faculty")
    ALUMNI = "ALUMNI", _("Alumni")
    OTHERS = "OTHERS", _("Others")


class Affiliation(models.TextChoices):
    """College a buyer or product poster belongs to."""

    CAS = "CAS", _("College of Arts and Sciences")
    CBA = "CBA", _("College of Business Administration")
    CCS = "CCS", _("College of Computing Studies")
    CED = "CED", _("College of Education")
    COE = "COE", _("College of Engineering")
    CON = "CON", _("College of Nursing")
    CHTM = "CHTM", _("College of Hospitality and Tourism Management")
    NOT_APPLICABLE = "NOT_APPLICABLE", _("Not Applicable")


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", _("Order Received")
    PROCESSING = "PROCESSING", _("In Processing")
    READY = "READY", _("Ready for Delivery")
    DELIVERED = "DELIVERED", _("Delivered")
    CANCELLED = "CANCELLED", _("Cancelled")


class PaymentStatus(models.TextChoices):
    """Aggregate payment state of an order."""

    PENDING = "PENDING", _("Payment Pending")
    DOWNPAYMENT = "DOWNPAYMENT", _("Down Payment Received")
    PAID = "PAID", _("Fully Paid")
    REFUNDED = "REFUNDED", _("Refunded")


class FulfillmentStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    PRODUCTION = "PRODUCTION", _("In Production")
    READY = "READY", _("Ready")
    COMPLETED = "COMPLETED", _("Completed")
    CANCELLED = "CANCELLED", _("Cancelled")


class CancellationReason(models.TextChoices):
    OUT_OF_STOCK = "OUT_OF_STOCK", _("Out of stock")
    CUSTOMER_REQUEST = "CUSTOMER_REQUEST", _("Customer request")
    PAYMENT_FAILED = "PAYMENT_FAILED", _("Payment failed")
    OTHERS = "OTHERS", _("Others")


class PaymentRecordStatus(models.TextChoices):
    """Status of a single payment record (not the order aggregate)."""

    PENDING = "PENDING", _("Pending")
    PROCESSING = "PROCESSING", _("Processing")
    COMPLETED = "COMPLETED", _("Completed")
    FAILED = "FAILED", _("Failed")
    REFUNDED = "REFUNDED", _("Refunded")


class PaymentMethod(models.TextChoices):
    CREDIT_CARD = "CREDIT_CARD", _("Credit Card")
    DEBIT_CARD = "DEBIT_CARD", _("Debit Card")
    PAYPAL = "PAYPAL", _("PayPal")
    BANK_TRANSFER = "BANK_TRANSFER", _("Bank Transfer")
    CASH = "CASH", _("Cash")


# Step shown on the order tracking screen; cancelled orders show no progress.
ORDER_PROGRESS_STEPS = {
    OrderStatus.PENDING: 1,
    OrderStatus.PROCESSING: 2,
    OrderStatus.READY: 3,
    OrderStatus.DELIVERED: 4,
    OrderStatus.CANCELLED: 0,
}
