from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class CustomerTier(Enum):
    NONE = "none"
    EXISTING = "existing"
    MEMBER = "member"


PAYMENT_METHODS = frozenset({"cash", "card", "upi"})
ORDER_STATUS_COMPLETED = "completed"


# --- Catalog / customers (read models returned by repositories) ---

@dataclass(frozen=True)
class CategoryRecord:
    id: str
    name: str


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    price: Decimal
    tax_rate: Decimal  # percent, 0-100
    category_id: str
    description: str | None = None
    sku: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class CustomerRecord:
    id: str
    first_name: str
    phone: str
    is_member: bool = False
    last_name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class NewCustomer:
    first_name: str
    phone: str
    last_name: str | None = None
    email: str | None = None
    is_member: bool = False


# --- Pricing ---

@dataclass(frozen=True)
class PricingLine:
    product_id: str
    quantity: int
    unit_price: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


# --- Orders ---

@dataclass(frozen=True)
class OrderLine:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class OrderSnapshot:
    """Everything the order store needs; fixed before the order row exists."""
    customer_id: str | None
    items: tuple[OrderLine, ...]
    pricing: PricingBreakdown
    payment_method: str
    transaction_id: str
    status: str = ORDER_STATUS_COMPLETED


@dataclass(frozen=True)
class OrderRecord:
    id: str
    customer_id: str | None
    items: tuple[OrderLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    transaction_id: str
    status: str
    created_at: datetime


# --- Payment ---

@dataclass(frozen=True)
class PaymentResult:
    success: bool
    transaction_id: str | None = None
    reason: str | None = None


# --- Checkout ---

@dataclass(frozen=True)
class CheckoutItem:
    product_id: str
    quantity: int
    price: Decimal | None = None  # client preview only


@dataclass(frozen=True)
class CheckoutRequest:
    items: tuple[CheckoutItem, ...]
    payment_method: str
    customer_id: str | None = None
    customer_email: str | None = None


@dataclass(frozen=True)
class CheckoutReceipt:
    order: OrderRecord
    transaction_id: str
    repriced: bool = False


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    price: Decimal


@dataclass
class CheckoutAttempt:
    id: str
    states: list[str] = field(default_factory=list)

    @property
    def state(self) -> str | None:
        return self.states[-1] if self.states else None
