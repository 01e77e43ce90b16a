from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from pos_backend.domain.entities import CategoryRecord, ProductRecord

class IProductRepository(ABC):
    @abstractmethod
    def get_products_by_ids(self, ids: Iterable[str]) -> List[ProductRecord]:
        """Ids that do not resolve are simply missing from the result."""
        pass

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    def list_products(self, category_id: Optional[str] = None) -> List[ProductRecord]:
        pass

    @abstractmethod
    def list_categories(self) -> List[CategoryRecord]:
        pass
