from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc
from pos_backend.domain.entities import OrderLine, OrderRecord, OrderSnapshot
from pos_backend.domain.models import Order
from pos_backend.infrastructure.database import SessionLocal
from pos_backend.interfaces.IOrderRepository import IOrderRepository


def _line_to_json(line: OrderLine) -> dict:
    return {
        "productId": line.product_id,
        "name": line.name,
        "quantity": line.quantity,
        "unitPrice": str(line.unit_price),
        "taxRate": str(line.tax_rate),
    }


def _line_from_json(data: dict) -> OrderLine:
    return OrderLine(
        product_id=data["productId"],
        name=data.get("name", ""),
        quantity=int(data["quantity"]),
        unit_price=Decimal(data["unitPrice"]),
        tax_rate=Decimal(data.get("taxRate", "0")),
    )


def to_order_record(row: Order) -> OrderRecord:
    return OrderRecord(
        id=row.id,
        customer_id=row.customer_id,
        items=tuple(_line_from_json(i) for i in row.items),
        subtotal=Decimal(row.subtotal),
        discount=Decimal(row.discount),
        tax=Decimal(row.tax),
        total=Decimal(row.total),
        payment_method=row.payment_method,
        transaction_id=row.transaction_id,
        status=row.status,
        created_at=row.created_at,
    )


class SqlOrderRepository(IOrderRepository):
    """Append-only order store. Rows are never updated once written."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def create_order(self, snapshot: OrderSnapshot) -> OrderRecord:
        session = self.session_factory()
        try:
            pricing = snapshot.pricing
            new_order = Order(
                customer_id=snapshot.customer_id,
                items=[_line_to_json(line) for line in snapshot.items],
                subtotal=str(pricing.subtotal),
                discount=str(pricing.discount),
                tax=str(pricing.tax),
                total=str(pricing.total),
                payment_method=snapshot.payment_method,
                transaction_id=snapshot.transaction_id,
                status=snapshot.status,
                created_at=datetime.now(timezone.utc),
            )
            session.add(new_order)
            session.commit()
            return to_order_record(new_order)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        session = self.session_factory()
        try:
            row = session.get(Order, order_id)
            return to_order_record(row) if row else None
        finally:
            session.close()

    def list_orders(self, limit: int = 50) -> List[OrderRecord]:
        """Newest first."""
        session = self.session_factory()
        try:
            rows = session.query(Order).order_by(desc(Order.created_at)).limit(limit).all()
            return [to_order_record(r) for r in rows]
        finally:
            session.close()
