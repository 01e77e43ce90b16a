from fastapi import APIRouter, Request
from pos_backend.domain.errors import NotFound, ValidationError
from pos_backend.interfaces.schemas import (
    CartCheckoutIn,
    CartItemIn,
    QuantityIn,
    cart_to_dict,
    order_to_dict,
)

router = APIRouter(prefix="/api/carts")


@router.get("/{session_id}")
def get_cart(request: Request, session_id: str):
    lines = request.app.state.cart_store.get_cart(session_id)
    return {"success": True, "cart": cart_to_dict(session_id, lines)}


@router.post("/{session_id}/items")
def add_item(request: Request, session_id: str, payload: CartItemIn):
    if payload.quantity <= 0:
        raise ValidationError("Quantity must be positive")
    product = request.app.state.product_repo.get_product(payload.product_id)
    if product is None:
        raise NotFound("Product", payload.product_id)
    # The snapshot price is the catalog price at add time; the client's value is ignored.
    lines = request.app.state.cart_store.add_item(session_id, product.id, payload.quantity, product.price)
    return {"success": True, "cart": cart_to_dict(session_id, lines)}


@router.patch("/{session_id}/items/{product_id}")
def update_item(request: Request, session_id: str, product_id: str, payload: QuantityIn):
    lines = request.app.state.cart_store.update_quantity(session_id, product_id, payload.quantity)
    return {"success": True, "cart": cart_to_dict(session_id, lines)}


@router.delete("/{session_id}/items/{product_id}")
def remove_item(request: Request, session_id: str, product_id: str):
    lines = request.app.state.cart_store.remove_item(session_id, product_id)
    return {"success": True, "cart": cart_to_dict(session_id, lines)}


@router.delete("/{session_id}")
def clear_cart(request: Request, session_id: str):
    request.app.state.cart_store.clear(session_id)
    return {"success": True, "cart": cart_to_dict(session_id, [])}


@router.post("/{session_id}/checkout")
async def checkout_cart(request: Request, session_id: str, payload: CartCheckoutIn):
    receipt = await request.app.state.orchestrator.checkout_cart(
        session_id,
        payment_method=payload.payment_method or "",
        customer_id=payload.customer_id or None,
        customer_email=payload.customer_email or None,
    )
    return {
        "success": True,
        "order": order_to_dict(receipt.order),
        "transactionId": receipt.transaction_id,
        "repriced": receipt.repriced,
    }
