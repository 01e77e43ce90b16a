from abc import ABC, abstractmethod
from typing import Optional

from pos_backend.domain.entities import CustomerRecord, NewCustomer

class ICustomerRepository(ABC):
    @abstractmethod
    def get_customer_by_id(self, customer_id: str) -> Optional[CustomerRecord]:
        pass

    @abstractmethod
    def get_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        pass

    @abstractmethod
    def create_customer(self, fields: NewCustomer) -> CustomerRecord:
        """Raises Conflict when the phone number is already registered."""
        pass
