"""Wire shapes for the POS API (camelCase on the wire, as the frontend sends them)."""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pos_backend.domain.entities import (
    CartLine,
    CategoryRecord,
    CheckoutItem,
    CheckoutRequest,
    CustomerRecord,
    OrderRecord,
    PricingBreakdown,
    ProductRecord,
)
from pos_backend.domain.pricing import round_money


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CartItemIn(WireModel):
    product_id: str = Field(alias="productId")
    quantity: int
    price: Optional[Decimal] = None


class CheckoutIn(WireModel):
    items: List[CartItemIn] = Field(default_factory=list)
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")

    def to_request(self) -> CheckoutRequest:
        return CheckoutRequest(
            items=tuple(CheckoutItem(i.product_id, i.quantity, i.price) for i in self.items),
            payment_method=self.payment_method or "",
            customer_id=self.customer_id or None,
            customer_email=self.customer_email or None,
        )


class CartCheckoutIn(WireModel):
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")


class CustomerIn(WireModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone: Optional[str] = None
    email: Optional[str] = None
    is_member: bool = Field(default=False, alias="isMember")


class QuantityIn(WireModel):
    quantity: int


# --- Presentation (money rounded to 2 places here and only here) ---

def money(value: Decimal) -> float:
    return float(round_money(value))


def category_to_dict(category: CategoryRecord, products: List[ProductRecord] = ()) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "products": [product_to_dict(p) for p in products],
    }


def product_to_dict(product: ProductRecord) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": money(product.price),
        "taxRate": float(product.tax_rate),
        "categoryId": product.category_id,
        "sku": product.sku,
        "image": product.image,
    }


def customer_to_dict(customer: CustomerRecord | None) -> dict | None:
    if customer is None:
        return None
    return {
        "id": customer.id,
        "firstName": customer.first_name,
        "lastName": customer.last_name,
        "phone": customer.phone,
        "email": customer.email,
        "isMember": customer.is_member,
    }


def pricing_to_dict(pricing: PricingBreakdown) -> dict:
    return {
        "subtotal": money(pricing.subtotal),
        "discount": money(pricing.discount),
        "tax": money(pricing.tax),
        "total": money(pricing.total),
    }


def order_to_dict(order: OrderRecord) -> dict:
    return {
        "id": order.id,
        "customerId": order.customer_id,
        "items": [
            {
                "productId": line.product_id,
                "name": line.name,
                "quantity": line.quantity,
                "price": money(line.unit_price),
                "taxRate": float(line.tax_rate),
            }
            for line in order.items
        ],
        "subtotal": money(order.subtotal),
        "discount": money(order.discount),
        "tax": money(order.tax),
        "total": money(order.total),
        "paymentMethod": order.payment_method,
        "transactionId": order.transaction_id,
        "status": order.status,
        "createdAt": order.created_at.isoformat(),
    }


def cart_to_dict(session_id: str, lines: List[CartLine]) -> dict:
    return {
        "sessionId": session_id,
        "items": [
            {"productId": l.product_id, "quantity": l.quantity, "price": money(l.price)} for l in lines
        ],
        "itemCount": sum(l.quantity for l in lines),
    }
