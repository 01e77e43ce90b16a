from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import desc
from pos_backend.domain.entities import CategoryRecord, ProductRecord
from pos_backend.domain.models import Category, Product
from pos_backend.infrastructure.database import SessionLocal
from pos_backend.interfaces.IProductRepository import IProductRepository


def to_product_record(row: Product) -> ProductRecord:
    return ProductRecord(
        id=row.id,
        name=row.name,
        price=Decimal(row.price),
        tax_rate=Decimal(row.tax_rate),
        category_id=row.category_id,
        description=row.description,
        sku=row.sku,
        image=row.image,
    )


class SqlProductRepository(IProductRepository):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_products_by_ids(self, ids: Iterable[str]) -> List[ProductRecord]:
        ids = list(set(ids))
        if not ids:
            return []
        session = self.session_factory()
        try:
            rows = session.query(Product).filter(Product.id.in_(ids)).all()
            return [to_product_record(r) for r in rows]
        finally:
            session.close()

    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        session = self.session_factory()
        try:
            row = session.get(Product, product_id)
            return to_product_record(row) if row else None
        finally:
            session.close()

    def list_products(self, category_id: Optional[str] = None) -> List[ProductRecord]:
        """Newest products first, optionally restricted to one category."""
        session = self.session_factory()
        try:
            query = session.query(Product)
            if category_id:
                query = query.filter(Product.category_id == category_id)
            rows = query.order_by(desc(Product.created_at), Product.name).all()
            return [to_product_record(r) for r in rows]
        finally:
            session.close()

    def list_categories(self) -> List[CategoryRecord]:
        session = self.session_factory()
        try:
            rows = session.query(Category).order_by(Category.name).all()
            return [CategoryRecord(id=r.id, name=r.name) for r in rows]
        finally:
            session.close()
