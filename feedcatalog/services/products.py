from __future__ import annotations

from feedcatalog.models import Product, Snapshot


def find_product(snapshot: Snapshot, product_id: int) -> Product | None:
    # Duplicate ids are allowed in a feed; the first row wins.
    for product in snapshot.products:
        if product.id == product_id:
            return product
    return None


def search_products(snapshot: Snapshot, q: str) -> list[Product]:
    term = q.strip().lower()
    return [
        product
        for product in snapshot.products
        if term in product.name.lower() or term in product.sku.lower()
    ]
