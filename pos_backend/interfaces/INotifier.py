from abc import ABC, abstractmethod

from pos_backend.domain.entities import OrderRecord

class INotifier(ABC):
    @abstractmethod
    def notify(self, email: str, order: OrderRecord) -> None:
        pass

    @abstractmethod
    def alert_operator(self, message: str) -> None:
        pass
