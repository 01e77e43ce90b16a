import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import OperationalError
from pos_backend.core.config import settings
from pos_backend.core.log import setup_logging

# 1. Infrastructure & Domain Imports
from pos_backend.application.customer_service import CustomerService
from pos_backend.application.orchestrator import CheckoutOrchestrator
from pos_backend.domain.errors import PosError
from pos_backend.infrastructure.cart_store import CartStore
from pos_backend.infrastructure.database import SessionLocal, create_tables, engine
from pos_backend.infrastructure.notification_service import NotificationService
from pos_backend.infrastructure.payment_gateway import SimulatedPaymentGateway
from pos_backend.infrastructure.repositories.customer_repository import SqlCustomerRepository
from pos_backend.infrastructure.repositories.order_repository import SqlOrderRepository
from pos_backend.infrastructure.repositories.product_repository import SqlProductRepository
from pos_backend.interfaces import cart_routes, catalog_routes, customer_routes, order_routes
from pos_backend.interfaces.schemas import order_to_dict

logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def wait_for_database() -> None:
    """Create tables, retrying while the database container is still starting."""
    for attempt in range(settings.DB_CONNECT_RETRIES):
        try:
            logger.info(f"Attempting DB connection ({attempt + 1}/{settings.DB_CONNECT_RETRIES})...")
            create_tables(engine)
            logger.info("DB connected and tables created.")
            return
        except OperationalError:
            logger.warning(f"DB not ready yet. Waiting {settings.DB_CONNECT_WAIT_SECONDS}s...")
            time.sleep(settings.DB_CONNECT_WAIT_SECONDS)
    raise RuntimeError(f"Could not connect to DB after {settings.DB_CONNECT_RETRIES} attempts")


def build_services() -> dict:
    """Composition root: the only place concrete collaborators are chosen."""
    product_repo = SqlProductRepository(SessionLocal)
    customer_repo = SqlCustomerRepository(SessionLocal)
    order_repo = SqlOrderRepository(SessionLocal)
    cart_store = CartStore(settings.REDIS_URL, ttl=settings.CART_TTL_SECONDS)
    orchestrator = CheckoutOrchestrator(
        product_repo=product_repo,
        customer_repo=customer_repo,
        order_repo=order_repo,
        gateway=SimulatedPaymentGateway(decline_rate=settings.PAYMENT_DECLINE_RATE),
        notifier=NotificationService(settings),
        payment_timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        cart_store=cart_store,
    )
    return {
        "product_repo": product_repo,
        "customer_repo": customer_repo,
        "order_repo": order_repo,
        "cart_store": cart_store,
        "customer_service": CustomerService(customer_repo),
        "orchestrator": orchestrator,
    }


def build_app(services: dict | None = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        wired = services
        if wired is None:
            setup_logging(settings.LOG_LEVEL)
            wait_for_database()
            wired = build_services()
        for name, service in wired.items():
            setattr(app.state, name, service)
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    @app.exception_handler(PosError)
    async def pos_error_handler(request: Request, exc: PosError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": message, "code": "VALIDATION_ERROR"},
        )

    # Include Routers
    app.include_router(catalog_routes.router)
    app.include_router(customer_routes.router)
    app.include_router(order_routes.router)
    app.include_router(cart_routes.router)

    @app.get("/api/health")
    def health_check():
        return {"ok": True}

    @app.get("/admin/orders", response_class=HTMLResponse)
    def read_orders(request: Request):
        # Latest 20 orders
        orders = [order_to_dict(o) for o in request.app.state.order_repo.list_orders(limit=20)]
        return templates.TemplateResponse(request, "dashboard.html", {"orders": orders})

    return app


app = build_app()
