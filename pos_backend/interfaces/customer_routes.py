from typing import Optional

from fastapi import APIRouter, Request
from pos_backend.interfaces.schemas import CustomerIn, customer_to_dict

router = APIRouter(prefix="/api/customers")


@router.get("")
def search_customer(request: Request, phone: Optional[str] = None):
    """Exact-match lookup by phone number."""
    customer, is_existing = request.app.state.customer_service.find_by_phone(phone or "")
    return {"success": True, "customer": customer_to_dict(customer), "isExisting": is_existing}


@router.post("")
def create_customer(request: Request, payload: CustomerIn):
    customer = request.app.state.customer_service.register(
        first_name=payload.first_name or "",
        phone=payload.phone or "",
        last_name=payload.last_name,
        email=payload.email,
        is_member=payload.is_member,
    )
    return {"success": True, "customer": customer_to_dict(customer)}
