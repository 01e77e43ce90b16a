import asyncio
import logging
import uuid
from dataclasses import dataclass

from pos_backend.domain.entities import (
    PAYMENT_METHODS,
    CheckoutAttempt,
    CheckoutItem,
    CheckoutReceipt,
    CheckoutRequest,
    CustomerRecord,
    CustomerTier,
    OrderLine,
    OrderSnapshot,
    PricingBreakdown,
    PricingLine,
)
from pos_backend.domain.errors import Declined, Failed, InvalidInput, NotFound, ValidationError
from pos_backend.domain.pricing import price_order, to_decimal
from pos_backend.interfaces.ICustomerRepository import ICustomerRepository
from pos_backend.interfaces.INotifier import INotifier
from pos_backend.interfaces.IOrderRepository import IOrderRepository
from pos_backend.interfaces.IPaymentGateway import IPaymentGateway
from pos_backend.interfaces.IProductRepository import IProductRepository

logger = logging.getLogger(__name__)

# --- Checkout states ---
STATE_RECEIVED = "RECEIVED"
STATE_VALIDATED = "VALIDATED"
STATE_PRICED = "PRICED"
STATE_PAYMENT_PENDING = "PAYMENT_PENDING"
STATE_COMMITTED = "COMMITTED"
STATE_DECLINED = "DECLINED"
STATE_FAILED = "FAILED"


def tier_for(customer: CustomerRecord | None) -> CustomerTier:
    if customer is None:
        return CustomerTier.NONE
    return CustomerTier.MEMBER if customer.is_member else CustomerTier.EXISTING


@dataclass(frozen=True)
class _PricedCheckout:
    customer: CustomerRecord | None
    order_lines: tuple[OrderLine, ...]
    pricing: PricingBreakdown
    repriced: bool


class CheckoutOrchestrator:
    """
    Runs one checkout attempt as a straight pipeline:
    validate -> price from authoritative data -> charge -> persist.

    Client-sent prices are never used for the order; they are only compared
    against the catalog to report drift. Nothing is retried here: a declined
    or failed attempt is restarted by the caller from scratch.
    """

    def __init__(
        self,
        product_repo: IProductRepository,
        customer_repo: ICustomerRepository,
        order_repo: IOrderRepository,
        gateway: IPaymentGateway,
        notifier: INotifier,
        payment_timeout: float = 5.0,
        cart_store=None,
    ):
        self.product_repo = product_repo
        self.customer_repo = customer_repo
        self.order_repo = order_repo
        self.gateway = gateway
        self.notifier = notifier  # Injected NotificationService
        self.payment_timeout = payment_timeout
        self.cart_store = cart_store

    # --- PUBLIC API ---

    def preview(self, request: CheckoutRequest) -> PricingBreakdown:
        """Authoritative pricing for the cart without charging anything."""
        attempt = self._new_attempt()
        self._validate(attempt, request)
        return self._price(attempt, request).pricing

    async def checkout(self, request: CheckoutRequest) -> CheckoutReceipt:
        attempt = self._new_attempt()
        method = self._validate(attempt, request)
        priced = self._price(attempt, request)
        transaction_id = await self._charge(attempt, priced.pricing, method)

        snapshot = OrderSnapshot(
            customer_id=priced.customer.id if priced.customer else None,
            items=priced.order_lines,
            pricing=priced.pricing,
            payment_method=method,
            transaction_id=transaction_id,
        )
        try:
            order = self.order_repo.create_order(snapshot)
        except Exception as e:
            self._transition(attempt, STATE_FAILED)
            # Money has most likely moved; this needs a human to reconcile.
            logger.error(
                f"[checkout {attempt.id}] order persistence failed after charge "
                f"{transaction_id} for {priced.pricing.total}: {e}",
                exc_info=True,
            )
            await self._alert_operator(
                f"Checkout {attempt.id}: payment {transaction_id} for {priced.pricing.total} "
                f"captured but the order was NOT saved ({e}). Reconcile manually."
            )
            raise Failed(
                "Payment was taken but the order could not be saved. Do not retry; contact a manager.",
                stage="persist",
                transaction_id=transaction_id,
            ) from e

        self._transition(attempt, STATE_COMMITTED)
        logger.info(f"[checkout {attempt.id}] order {order.id} committed, total {order.total}, txn {transaction_id}")

        email = request.customer_email or (priced.customer.email if priced.customer else None)
        await self._send_receipt(email, order)

        return CheckoutReceipt(order=order, transaction_id=transaction_id, repriced=priced.repriced)

    async def checkout_cart(
        self,
        session_id: str,
        payment_method: str,
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> CheckoutReceipt:
        """Checks out a stored cart; the purchased lines leave the cart only once the order exists."""
        if self.cart_store is None:
            raise RuntimeError("No cart store configured")

        cart = self.cart_store.get_cart(session_id)
        request = CheckoutRequest(
            items=tuple(CheckoutItem(l.product_id, l.quantity, l.price) for l in cart),
            payment_method=payment_method,
            customer_id=customer_id,
            customer_email=customer_email,
        )
        receipt = await self.checkout(request)
        self.cart_store.remove_lines(session_id, cart)
        return receipt

    # --- STAGES ---

    def _new_attempt(self) -> CheckoutAttempt:
        attempt = CheckoutAttempt(id=uuid.uuid4().hex[:12])
        self._transition(attempt, STATE_RECEIVED)
        return attempt

    def _transition(self, attempt: CheckoutAttempt, state: str) -> None:
        logger.debug(f"[checkout {attempt.id}] {attempt.state} -> {state}")
        attempt.states.append(state)

    def _validate(self, attempt: CheckoutAttempt, request: CheckoutRequest) -> str:
        if not request.items:
            raise ValidationError("Items are required")

        for item in request.items:
            if not isinstance(item.product_id, str) or not item.product_id.strip():
                raise ValidationError("Every item needs a productId")
            if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity <= 0:
                raise ValidationError(f"Quantity for product {item.product_id} must be a positive integer")
            if item.price is not None:
                try:
                    client_price = to_decimal(item.price, "price")
                except InvalidInput as e:
                    raise ValidationError(f"Price for product {item.product_id}: {e.message}") from None
                if client_price < 0:
                    raise ValidationError(f"Price for product {item.product_id} cannot be negative")

        if not isinstance(request.payment_method, str) or not request.payment_method.strip():
            raise ValidationError("Payment method is required")
        method = request.payment_method.strip().lower()
        if method not in PAYMENT_METHODS:
            raise ValidationError(
                f"Unsupported payment method '{request.payment_method}'. Use one of: {', '.join(sorted(PAYMENT_METHODS))}"
            )

        self._transition(attempt, STATE_VALIDATED)
        return method

    def _price(self, attempt: CheckoutAttempt, request: CheckoutRequest) -> _PricedCheckout:
        customer = None
        if request.customer_id:
            customer = self.customer_repo.get_customer_by_id(request.customer_id)
            if customer is None:
                raise NotFound("Customer", request.customer_id)

        wanted = {item.product_id for item in request.items}
        products = {p.id: p for p in self.product_repo.get_products_by_ids(wanted)}
        missing = wanted - products.keys()
        if missing:
            raise NotFound("Product", missing)

        lines = []
        order_lines = []
        repriced = False
        for item in request.items:
            product = products[item.product_id]
            if item.price is not None and to_decimal(item.price) != product.price:
                repriced = True
                logger.warning(
                    f"[checkout {attempt.id}] client price {item.price} for {product.id} "
                    f"differs from catalog price {product.price}; using catalog price"
                )
            lines.append(PricingLine(product.id, item.quantity, product.price, product.tax_rate))
            order_lines.append(OrderLine(product.id, product.name, item.quantity, product.price, product.tax_rate))

        pricing = price_order(lines, tier_for(customer))
        self._transition(attempt, STATE_PRICED)
        return _PricedCheckout(customer, tuple(order_lines), pricing, repriced)

    async def _charge(self, attempt: CheckoutAttempt, pricing: PricingBreakdown, method: str) -> str:
        self._transition(attempt, STATE_PAYMENT_PENDING)
        try:
            result = await asyncio.wait_for(self.gateway.charge(pricing.total, method), timeout=self.payment_timeout)
        except asyncio.TimeoutError:
            self._transition(attempt, STATE_FAILED)
            logger.error(f"[checkout {attempt.id}] gateway timed out after {self.payment_timeout}s charging {pricing.total}")
            await self._alert_operator(
                f"Checkout {attempt.id}: gateway timed out charging {pricing.total} by {method}. "
                f"Settlement unknown, verify with the gateway."
            )
            raise Failed("Payment gateway did not respond in time; the charge state is unknown.", stage="payment")
        except Exception as e:
            self._transition(attempt, STATE_FAILED)
            logger.error(f"[checkout {attempt.id}] gateway error charging {pricing.total}: {e}", exc_info=True)
            await self._alert_operator(f"Checkout {attempt.id}: gateway error charging {pricing.total} by {method}: {e}")
            raise Failed("Payment gateway error; the charge state is unknown.", stage="payment") from e

        if not result.success:
            self._transition(attempt, STATE_DECLINED)
            reason = result.reason or "Payment failed"
            logger.info(f"[checkout {attempt.id}] payment declined: {reason}")
            raise Declined(reason)

        if not result.transaction_id:
            self._transition(attempt, STATE_FAILED)
            logger.error(f"[checkout {attempt.id}] gateway approved {pricing.total} without a transaction id")
            await self._alert_operator(f"Checkout {attempt.id}: gateway approved {pricing.total} without a transaction id")
            raise Failed("Payment gateway returned an incomplete approval.", stage="payment")

        return result.transaction_id

    # --- SIDE EFFECTS (best-effort) ---
    # Notifiers do blocking network I/O (SMTP, Twilio), so they run in a worker
    # thread and never hold up other checkouts on the event loop.

    async def _send_receipt(self, email: str | None, order) -> None:
        if not email:
            return
        try:
            await asyncio.to_thread(self.notifier.notify, email, order)
        except Exception as e:
            logger.warning(f"Receipt for order {order.id} could not be sent: {e}")

    async def _alert_operator(self, message: str) -> None:
        try:
            await asyncio.to_thread(self.notifier.alert_operator, message)
        except Exception as e:
            logger.warning(f"Operator alert could not be sent: {e}")
