import json
import logging
from decimal import Decimal
from typing import List

import redis
from redis.exceptions import RedisError
from pos_backend.domain.entities import CartLine

logger = logging.getLogger(__name__)


class CartStore:
    """
    Server-side cache of each terminal's cart. Prices kept here are the
    add-to-cart snapshot and are only a preview; checkout re-prices.

    Redis is the primary store; when it is unreachable the carts live in
    process memory until restart.
    """

    def __init__(self, redis_url: str | None = None, ttl: int = 3600, client=None):
        self.ttl = ttl
        self.redis = client
        self.redis_available = False
        self._memory_store: dict[str, str] = {}

        if self.redis is None and redis_url:
            try:
                self.redis = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
            except Exception as e:
                logger.warning(f"CartStore: invalid Redis URL ({e}). Using RAM fallback.")
                self.redis = None

        if self.redis is not None:
            try:
                self.redis.ping()
                self.redis_available = True
                logger.info("CartStore: connected to Redis")
            except Exception as e:
                logger.warning(f"CartStore: Redis unreachable ({e}). Using RAM fallback.")

    @staticmethod
    def _key(session_id: str) -> str:
        return f"cart:{session_id}"

    # --- raw storage ---

    def _load(self, session_id: str) -> List[CartLine]:
        key = self._key(session_id)
        data = None
        read_from_redis = False

        if self.redis_available:
            try:
                data = self.redis.get(key)
                read_from_redis = True
            except RedisError as e:
                self._handle_redis_error(e)

        # Redis is authoritative while reachable, so an expired cart stays expired
        if not read_from_redis:
            data = self._memory_store.get(key)
        if not data:
            return []

        return [
            CartLine(product_id=row["productId"], quantity=int(row["quantity"]), price=Decimal(row["price"]))
            for row in json.loads(data)
        ]

    def _save(self, session_id: str, lines: List[CartLine]) -> None:
        key = self._key(session_id)
        if not lines:
            self.clear(session_id)
            return

        payload = json.dumps([
            {"productId": l.product_id, "quantity": l.quantity, "price": str(l.price)} for l in lines
        ])

        if self.redis_available:
            try:
                self.redis.setex(key, self.ttl, payload)
            except RedisError as e:
                self._handle_redis_error(e)

        # Always write to RAM so a Redis outage does not lose the cart
        self._memory_store[key] = payload

    def _handle_redis_error(self, e):
        logger.warning(f"Redis error: {e}. Switching CartStore to RAM mode.")
        self.redis_available = False

    # --- cart operations ---

    def get_cart(self, session_id: str) -> List[CartLine]:
        return self._load(session_id)

    def add_item(self, session_id: str, product_id: str, quantity: int, price: Decimal) -> List[CartLine]:
        """Adds to an existing line for the same product instead of duplicating it."""
        if quantity <= 0:
            raise ValueError("Quantity must be positive")

        lines = self._load(session_id)
        for i, line in enumerate(lines):
            if line.product_id == product_id:
                lines[i] = CartLine(product_id, line.quantity + quantity, price)
                break
        else:
            lines.append(CartLine(product_id, quantity, price))

        self._save(session_id, lines)
        return lines

    def update_quantity(self, session_id: str, product_id: str, quantity: int) -> List[CartLine]:
        lines = self._load(session_id)
        if quantity <= 0:
            lines = [l for l in lines if l.product_id != product_id]
        else:
            lines = [CartLine(l.product_id, quantity, l.price) if l.product_id == product_id else l for l in lines]
        self._save(session_id, lines)
        return lines

    def remove_item(self, session_id: str, product_id: str) -> List[CartLine]:
        return self.update_quantity(session_id, product_id, 0)

    def clear(self, session_id: str) -> None:
        key = self._key(session_id)
        if self.redis_available:
            try:
                self.redis.delete(key)
            except RedisError as e:
                self._handle_redis_error(e)
        self._memory_store.pop(key, None)

    def remove_lines(self, session_id: str, checked_out: List[CartLine]) -> List[CartLine]:
        """
        Takes the given quantities out of the cart. Lines added or topped up
        after `checked_out` was read stay in the cart.
        """
        taken: dict[str, int] = {}
        for line in checked_out:
            taken[line.product_id] = taken.get(line.product_id, 0) + line.quantity

        remaining = []
        for line in self._load(session_id):
            quantity = line.quantity - taken.pop(line.product_id, 0)
            if quantity > 0:
                remaining.append(CartLine(line.product_id, quantity, line.price))
        self._save(session_id, remaining)
        return remaining
