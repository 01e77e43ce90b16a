import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pos_backend.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, unique=True)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    description = Column(Text)
    # Exact decimals kept as strings; SQLite has no native decimal type.
    price = Column(String, nullable=False)
    tax_rate = Column(String, nullable=False, default="0")
    sku = Column(String, unique=True)
    image = Column(String)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="products")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String)
    phone = Column(String, nullable=False, unique=True, index=True)
    email = Column(String)
    is_member = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True, index=True)
    status = Column(String, nullable=False, default="completed")

    # Snapshot of the priced lines, never a live reference to products.
    items = Column(JSON, nullable=False)

    subtotal = Column(String, nullable=False)
    discount = Column(String, nullable=False)
    tax = Column(String, nullable=False)
    total = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)
    transaction_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
