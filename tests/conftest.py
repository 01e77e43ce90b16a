import asyncio
import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pos_backend.application.customer_service import CustomerService
from pos_backend.application.orchestrator import CheckoutOrchestrator
from pos_backend.domain.entities import (
    CategoryRecord,
    CustomerRecord,
    OrderRecord,
    PaymentResult,
    ProductRecord,
)
from pos_backend.domain.errors import Conflict
from pos_backend.infrastructure.cart_store import CartStore
from pos_backend.interfaces.ICustomerRepository import ICustomerRepository
from pos_backend.interfaces.INotifier import INotifier
from pos_backend.interfaces.IOrderRepository import IOrderRepository
from pos_backend.interfaces.IPaymentGateway import IPaymentGateway
from pos_backend.interfaces.IProductRepository import IProductRepository


class FakeProductRepository(IProductRepository):
    def __init__(self, products, categories=()):
        self.products = {p.id: p for p in products}
        self.categories = list(categories)
        self.lookups = []

    def get_products_by_ids(self, ids):
        ids = list(ids)
        self.lookups.append(sorted(ids))
        return [self.products[i] for i in set(ids) if i in self.products]

    def get_product(self, product_id):
        return self.products.get(product_id)

    def list_products(self, category_id=None):
        return [p for p in self.products.values() if category_id is None or p.category_id == category_id]

    def list_categories(self):
        return list(self.categories)


class FakeCustomerRepository(ICustomerRepository):
    def __init__(self, customers=()):
        self.customers = {c.id: c for c in customers}
        self._lock = threading.Lock()
        self._next = 100

    def get_customer_by_id(self, customer_id):
        return self.customers.get(customer_id)

    def get_customer_by_phone(self, phone):
        return next((c for c in self.customers.values() if c.phone == phone), None)

    def create_customer(self, fields):
        with self._lock:
            if self.get_customer_by_phone(fields.phone):
                raise Conflict("Customer with this phone already exists")
            self._next += 1
            record = CustomerRecord(
                id=f"cust-{self._next}",
                first_name=fields.first_name,
                last_name=fields.last_name,
                phone=fields.phone,
                email=fields.email,
                is_member=fields.is_member,
            )
            self.customers[record.id] = record
            return record


class FakeOrderRepository(IOrderRepository):
    def __init__(self, fail_with=None):
        self.orders = []
        self.fail_with = fail_with

    def create_order(self, snapshot):
        if self.fail_with:
            raise self.fail_with
        pricing = snapshot.pricing
        order = OrderRecord(
            id=f"order-{len(self.orders) + 1}",
            customer_id=snapshot.customer_id,
            items=snapshot.items,
            subtotal=pricing.subtotal,
            discount=pricing.discount,
            tax=pricing.tax,
            total=pricing.total,
            payment_method=snapshot.payment_method,
            transaction_id=snapshot.transaction_id,
            status=snapshot.status,
            created_at=datetime(2025, 1, 15, 6, 30, tzinfo=timezone.utc),
        )
        self.orders.append(order)
        return order

    def get_order(self, order_id):
        return next((o for o in self.orders if o.id == order_id), None)

    def list_orders(self, limit=50):
        return list(reversed(self.orders))[:limit]


class ScriptedGateway(IPaymentGateway):
    """Returns the queued results in order; approves when the queue is empty."""

    def __init__(self, *results, delay=0.0, error=None):
        self.results = list(results)
        self.delay = delay
        self.error = error
        self.calls = []

    async def charge(self, amount, method):
        self.calls.append((amount, method))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return PaymentResult(success=True, transaction_id=f"TXN-TEST-{len(self.calls)}")


class RecordingNotifier(INotifier):
    def __init__(self, fail=False):
        self.fail = fail
        self.receipts = []
        self.alerts = []

    def notify(self, email, order):
        if self.fail:
            raise RuntimeError("smtp down")
        self.receipts.append((email, order))

    def alert_operator(self, message):
        if self.fail:
            raise RuntimeError("twilio down")
        self.alerts.append(message)


SHIRT = ProductRecord(id="p-shirt", name="Cotton Shirt", price=Decimal("100"), tax_rate=Decimal("12"), category_id="c-men")
SCARF = ProductRecord(id="p-scarf", name="Silk Scarf", price=Decimal("100"), tax_rate=Decimal("5"), category_id="c-women")
MEMBER = CustomerRecord(id="c-member", first_name="Asha", phone="9876543210", is_member=True, email="asha@example.com")
REGULAR = CustomerRecord(id="c-regular", first_name="Ravi", phone="9123456780", is_member=False)


@pytest.fixture
def product_repo():
    return FakeProductRepository(
        [SHIRT, SCARF],
        categories=[CategoryRecord("c-men", "Men"), CategoryRecord("c-women", "Women")],
    )


@pytest.fixture
def customer_repo():
    return FakeCustomerRepository([MEMBER, REGULAR])


@pytest.fixture
def order_repo():
    return FakeOrderRepository()


@pytest.fixture
def gateway():
    return ScriptedGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cart_store():
    return CartStore(redis_url=None)


@pytest.fixture
def orchestrator(product_repo, customer_repo, order_repo, gateway, notifier, cart_store):
    return CheckoutOrchestrator(
        product_repo=product_repo,
        customer_repo=customer_repo,
        order_repo=order_repo,
        gateway=gateway,
        notifier=notifier,
        payment_timeout=0.5,
        cart_store=cart_store,
    )


@pytest.fixture
def customer_service(customer_repo):
    return CustomerService(customer_repo)
