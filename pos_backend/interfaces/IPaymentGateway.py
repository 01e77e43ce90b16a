from abc import ABC, abstractmethod
from decimal import Decimal

from pos_backend.domain.entities import PaymentResult

class IPaymentGateway(ABC):
    @abstractmethod
    async def charge(self, amount: Decimal, method: str) -> PaymentResult:
        pass
