from abc import ABC, abstractmethod
from typing import List, Optional

from pos_backend.domain.entities import OrderRecord, OrderSnapshot

class IOrderRepository(ABC):
    @abstractmethod
    def create_order(self, snapshot: OrderSnapshot) -> OrderRecord:
        pass

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        pass

    @abstractmethod
    def list_orders(self, limit: int = 50) -> List[OrderRecord]:
        pass
