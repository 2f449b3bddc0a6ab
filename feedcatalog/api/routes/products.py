from fastapi import APIRouter, Depends, Query

from feedcatalog.api.deps import get_catalog_store
from feedcatalog.core.errors import ApiError, AppHTTPException
from feedcatalog.schemas.products import ProductOut
from feedcatalog.services.catalog import CatalogStore
from feedcatalog.services.products import find_product, search_products

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductOut])
def list_products(store: CatalogStore = Depends(get_catalog_store)) -> list[ProductOut]:
    return [ProductOut.from_product(product) for product in store.current().products]


@router.get("/search", response_model=list[ProductOut])
def search(q: str = Query(...), store: CatalogStore = Depends(get_catalog_store)) -> list[ProductOut]:
    return [ProductOut.from_product(product) for product in search_products(store.current(), q)]


@router.get("/{product_id}", response_model=ProductOut)
def product_detail(product_id: int, store: CatalogStore = Depends(get_catalog_store)) -> ProductOut:
    product = find_product(store.current(), product_id)
    if product is None:
        raise AppHTTPException(
            status_code=404,
            error=ApiError(code="not_found", message="Product not found", details={"product_id": product_id}),
        )
    return ProductOut.from_product(product)
