import asyncio
import logging
import random
import string
import time
from decimal import Decimal

from pos_backend.domain.entities import PaymentResult
from pos_backend.interfaces.IPaymentGateway import IPaymentGateway

logger = logging.getLogger(__name__)

_REF_ALPHABET = string.ascii_uppercase + string.digits


class SimulatedPaymentGateway(IPaymentGateway):
    """
    Stand-in for the card/UPI terminal integration. Declines a configurable
    share of charges at random so the checkout failure paths get exercised.
    """

    def __init__(self, decline_rate: float = 0.1, rng: random.Random | None = None, latency: float = 0.0):
        self.decline_rate = decline_rate
        self.rng = rng or random.Random()
        self.latency = latency

    def _transaction_id(self) -> str:
        suffix = "".join(self.rng.choice(_REF_ALPHABET) for _ in range(9))
        return f"TXN-{int(time.time() * 1000)}-{suffix}"

    async def charge(self, amount: Decimal, method: str) -> PaymentResult:
        if self.latency:
            await asyncio.sleep(self.latency)

        if self.rng.random() < self.decline_rate:
            logger.info(f"Simulated gateway declined {method} charge of {amount}")
            return PaymentResult(success=False, reason="Payment declined by gateway")

        return PaymentResult(success=True, transaction_id=self._transaction_id())
