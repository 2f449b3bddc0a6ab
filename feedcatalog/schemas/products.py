from pydantic import BaseModel

from feedcatalog.models import Product


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    quantity: int

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            price=float(product.price),
            quantity=product.quantity,
        )
