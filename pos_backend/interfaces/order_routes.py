from fastapi import APIRouter, Query, Request
from pos_backend.domain.errors import NotFound
from pos_backend.interfaces.schemas import CheckoutIn, order_to_dict, pricing_to_dict

router = APIRouter(prefix="/api/orders")


@router.post("/preview")
def preview_order(request: Request, payload: CheckoutIn):
    """Server-side totals for a cart, used to refresh the client's preview."""
    pricing = request.app.state.orchestrator.preview(payload.to_request())
    return {"success": True, "pricing": pricing_to_dict(pricing)}


@router.post("")
async def create_order(request: Request, payload: CheckoutIn):
    receipt = await request.app.state.orchestrator.checkout(payload.to_request())
    return {
        "success": True,
        "order": order_to_dict(receipt.order),
        "transactionId": receipt.transaction_id,
        "repriced": receipt.repriced,
    }


@router.get("")
def list_orders(request: Request, limit: int = Query(50, ge=1, le=200)):
    orders = request.app.state.order_repo.list_orders(limit=limit)
    return {"success": True, "orders": [order_to_dict(o) for o in orders]}


@router.get("/{order_id}")
def get_order(request: Request, order_id: str):
    order = request.app.state.order_repo.get_order(order_id)
    if order is None:
        raise NotFound("Order", order_id)
    return {"success": True, "order": order_to_dict(order)}
