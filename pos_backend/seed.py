"""
Seed the catalog with the store's categories and products.

    python -m pos_backend.seed
"""
import logging

from pos_backend.core.config import settings
from pos_backend.core.log import setup_logging
from pos_backend.domain.models import Category, Product
from pos_backend.infrastructure.database import SessionLocal, create_tables, engine

logger = logging.getLogger(__name__)

CATEGORIES = ["Women", "Men", "Summer Wear", "Winter Wear"]

# (category, name, description, price, GST %, sku)
PRODUCTS = [
    ("Women", "Silk Scarf", "Elegant silk scarf in various colors", "499", "5", "SCARF-001"),
    ("Women", "Designer Dress", "Beautiful floral summer dress", "2999", "12", "DRESS-001"),
    ("Women", "Women's Blazer", "Professional blazer for office wear", "3999", "12", "BLAZER-W-001"),
    ("Men", "Cotton Shirt", "Comfortable cotton shirt", "1299", "5", "SHIRT-M-001"),
    ("Men", "Denim Jeans", "Classic fit denim jeans", "1999", "12", "JEANS-M-001"),
    ("Men", "Leather Jacket", "Genuine leather biker jacket", "5999", "12", "JACKET-M-001"),
    ("Summer Wear", "Linen Shorts", "Breathable linen shorts", "899", "5", "SHORTS-001"),
    ("Summer Wear", "Cotton T-Shirt", "Basic crew neck tee", "599", "5", "TEE-001"),
    ("Summer Wear", "Straw Hat", "Wide brim straw hat", "699", "5", "HAT-001"),
    ("Winter Wear", "Wool Sweater", "Warm merino wool sweater", "2499", "12", "SWEATER-001"),
    ("Winter Wear", "Puffer Jacket", "Lightweight insulated jacket", "4499", "12", "PUFFER-001"),
    ("Winter Wear", "Knit Beanie", "Soft knit beanie", "399", "5", "BEANIE-001"),
]


def seed(session_factory=SessionLocal) -> int:
    """Insert missing categories and products; returns the number of products added."""
    session = session_factory()
    added = 0
    try:
        categories = {c.name: c for c in session.query(Category).all()}
        for name in CATEGORIES:
            if name not in categories:
                categories[name] = Category(name=name)
                session.add(categories[name])
        session.flush()

        existing_skus = {sku for (sku,) in session.query(Product.sku).all()}
        for category, name, description, price, tax_rate, sku in PRODUCTS:
            if sku in existing_skus:
                continue
            session.add(Product(
                name=name,
                description=description,
                price=price,
                tax_rate=tax_rate,
                sku=sku,
                category_id=categories[category].id,
            ))
            added += 1
        session.commit()
        return added
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    create_tables(engine)
    count = seed()
    logger.info(f"Seeded {count} products into {settings.DATABASE_URL}")
