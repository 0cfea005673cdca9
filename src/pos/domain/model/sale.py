"""Sale aggregate — the core of the domain.

A Sale is an append-only ledger entry.  It owns its line items, which are
frozen at creation together with the unit price each product had at that
moment.  After creation only the status (through the lifecycle rules in
``sale_status``) and the free-text notes may change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pos.domain.exceptions import ValidationError
from pos.domain.model.sale_status import SaleStatus, ensure_transition
from pos.domain.model.value_objects import Money, Quantity

SALE_SEQUENCE = "sale_number"
DEFAULT_SALE_PREFIX = "SALE"


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    ONLINE = "online"

    @staticmethod
    def parse(raw: str | PaymentMethod) -> PaymentMethod:
        if isinstance(raw, PaymentMethod):
            return raw
        try:
            return PaymentMethod(raw.strip().lower())
        except (ValueError, AttributeError) as exc:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise ValidationError(
                f"Invalid payment method {raw!r} (expected one of: {allowed})"
            ) from exc


def format_sale_number(value: int, prefix: str = DEFAULT_SALE_PREFIX) -> str:
    """Format a reserved sequence value, e.g. 123 -> ``SALE-000123``."""
    if value <= 0:
        raise ValidationError(f"Sequence value must be positive, got {value}")
    return f"{prefix}-{value:06d}"


@dataclass(frozen=True)
class SaleLineItem:
    """Captures a product reference plus the price snapshot at sale time.

    ``product_id`` is a read-only link to the catalog; ``product_name`` and
    ``sku`` are kept so history stays readable if the catalog changes.
    """

    product_id: str
    product_name: str
    sku: str
    quantity: Quantity
    unit_price: Money  # locked at sale-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Money
    tax: Money
    discount: Money
    total: Money


def compute_totals(items: list[SaleLineItem], tax: Money, discount: Money) -> SaleTotals:
    """``total = subtotal + tax - discount``, rejected if it would go negative."""
    subtotal = Money.zero()
    for item in items:
        subtotal = subtotal + item.line_total
    subtotal = subtotal.quantized()
    tax = tax.quantized()
    discount = discount.quantized()

    gross = subtotal + tax
    if discount > gross:
        raise ValidationError(
            f"Sale total would be negative (subtotal {subtotal} + tax {tax} "
            f"- discount {discount})"
        )
    return SaleTotals(subtotal=subtotal, tax=tax, discount=discount, total=gross - discount)


@dataclass
class Sale:
    """Aggregate root for sales.

    Use the ``Sale.create()`` factory for new sales; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted sales without re-validating.
    """

    id: int | None
    sale_number: str
    items: tuple[SaleLineItem, ...]
    subtotal: Money
    tax: Money
    discount: Money
    total: Money
    payment_method: PaymentMethod
    status: SaleStatus = SaleStatus.COMPLETED
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW sales only) ------------------------------------

    @staticmethod
    def create(
        sale_number: str,
        items: list[SaleLineItem],
        payment_method: PaymentMethod,
        tax: Money,
        discount: Money,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        notes: str | None = None,
        status: SaleStatus = SaleStatus.COMPLETED,
    ) -> Sale:
        """Create a new sale, enforcing all invariants."""
        if not items:
            raise ValidationError("Sale must have at least one item")
        if not sale_number:
            raise ValidationError("Sale number is required")
        if status is SaleStatus.CANCELLED:
            raise ValidationError("A new sale cannot start out cancelled")

        totals = compute_totals(items, tax, discount)
        now = datetime.now(timezone.utc)
        return Sale(
            id=None,
            sale_number=sale_number,
            items=tuple(items),
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.total,
            payment_method=payment_method,
            status=status,
            customer_name=_clean(customer_name),
            customer_phone=_clean(customer_phone),
            notes=_clean(notes),
            created_at=now,
            updated_at=now,
        )

    # --- Mutations ------------------------------------------------------------

    def transition_to(self, new_status: SaleStatus) -> SaleStatus:
        """Move to ``new_status``; returns the previous status.

        Moving to CANCELLED here does NOT restore stock; the cancellation
        flow must restore it first, inside the same unit of work.
        """
        ensure_transition(self.status, new_status)
        previous = self.status
        self.status = new_status
        self.updated_at = datetime.now(timezone.utc)
        return previous

    def update_notes(self, notes: str | None) -> None:
        self.notes = _clean(notes)
        self.updated_at = datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def reconciles(self) -> bool:
        """True when ``total == subtotal + tax - discount`` holds exactly."""
        return self.total.amount == (
            self.subtotal.amount + self.tax.amount - self.discount.amount
        )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
