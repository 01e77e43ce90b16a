from typing import Optional

from fastapi import APIRouter, Request
from pos_backend.domain.errors import NotFound
from pos_backend.interfaces.schemas import category_to_dict, product_to_dict

router = APIRouter(prefix="/api")


@router.get("/categories")
def list_categories(request: Request):
    product_repo = request.app.state.product_repo
    products = product_repo.list_products()
    categories = [
        category_to_dict(c, [p for p in products if p.category_id == c.id])
        for c in product_repo.list_categories()
    ]
    return {"success": True, "categories": categories}


@router.get("/products")
def list_products(request: Request, categoryId: Optional[str] = None):
    products = request.app.state.product_repo.list_products(category_id=categoryId)
    return {"success": True, "products": [product_to_dict(p) for p in products]}


@router.get("/products/{product_id}")
def get_product(request: Request, product_id: str):
    product = request.app.state.product_repo.get_product(product_id)
    if product is None:
        raise NotFound("Product", product_id)
    return {"success": True, "product": product_to_dict(product)}
