"""In-memory product service behind the guarded endpoints."""

from functools import lru_cache

from dedupguard.exceptions import ResourceNotFoundError
from dedupguard.models import ProductRequest


class ProductService:
    """Keeps created products keyed by product id."""

    def __init__(self) -> None:
        self._products: dict[str, ProductRequest] = {}

    def create_product(self, request: ProductRequest) -> ProductRequest:
        """Store a product. A later create with the same id replaces it."""
        if request.product_id is not None:
            self._products[request.product_id] = request
        return request

    def get_product(self, product_id: str) -> ProductRequest:
        """Get a product by id.

        Raises:
            ResourceNotFoundError: If no product has this id
        """
        product = self._products.get(product_id)
        if product is None:
            raise ResourceNotFoundError("Product", "productId", product_id)
        return product


@lru_cache()
def get_product_service() -> ProductService:
    """Get product service instance (lazy init)."""
    return ProductService()
