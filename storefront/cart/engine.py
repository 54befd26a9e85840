"""
Cart Engine

In-session record of what a shopper intends to buy. Lines are keyed by
product id in first-added order and persisted to cart storage after every
mutation. No operation talks to the backend; prices and stock are snapshots
taken when the product was added.
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..models.cart import CartLine, ProductSnapshot
from ..models.product import Product
from .storage import CartStorage, CartStorageError

logger = logging.getLogger(__name__)


class CartEngine:
    """Ordered product id -> CartLine mapping with durable persistence"""

    def __init__(self, storage: Optional[CartStorage] = None, key: str = "cart"):
        self.storage = storage
        self.key = key
        self._lines: dict[str, CartLine] = {}
        self.durably_saved = True
        self._rehydrate()

    # ==================== Mutations ====================

    def add_to_cart(self, product: Product | ProductSnapshot) -> CartLine:
        """Add one unit; a new line snapshots the product as it is now"""
        line = self._lines.get(product.id)
        if line:
            line.quantity += 1
        else:
            snapshot = product if isinstance(product, ProductSnapshot) else ProductSnapshot.from_product(product)
            line = CartLine(product=snapshot.model_copy(), quantity=1)
            self._lines[product.id] = line

        self._persist()
        return line.model_copy(deep=True)

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity; zero or below removes the line"""
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return None

        line = self._lines.get(product_id)
        if not line:
            return None

        line.quantity = quantity
        self._persist()
        return line.model_copy(deep=True)

    def remove_from_cart(self, product_id: str) -> None:
        if self._lines.pop(product_id, None) is not None:
            self._persist()

    def clear_cart(self) -> None:
        self._lines.clear()
        self._persist()

    def remove_ordered(self, ordered: list[CartLine]) -> None:
        """Take ordered quantities out of the cart; units added since stay"""
        for ordered_line in ordered:
            line = self._lines.get(ordered_line.product.id)
            if not line:
                continue
            line.quantity -= ordered_line.quantity
            if line.quantity <= 0:
                del self._lines[ordered_line.product.id]
        self._persist()

    # ==================== Derived values ====================

    @property
    def items(self) -> list[CartLine]:
        return [line.model_copy(deep=True) for line in self._lines.values()]

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total_amount(self) -> float:
        return round(sum(line.line_total for line in self._lines.values()), 2)

    def get_line(self, product_id: str) -> Optional[CartLine]:
        line = self._lines.get(product_id)
        return line.model_copy(deep=True) if line else None

    # ==================== Serialization ====================

    def to_payload(self) -> list[dict[str, Any]]:
        return [line.model_dump(mode="json") for line in self._lines.values()]

    def load_payload(self, payload: Any) -> None:
        """Replace the lines from a serialized list, skipping malformed entries"""
        self._lines = {}
        if not isinstance(payload, list):
            logger.warning(f"Ignoring stored cart {self.key}: expected a list")
            return

        for entry in payload:
            try:
                line = CartLine.model_validate(entry)
            except ValidationError as e:
                logger.warning(f"Dropping malformed cart line in {self.key}: {e.error_count()} errors")
                continue

            existing = self._lines.get(line.product.id)
            if existing:
                existing.quantity += line.quantity
            else:
                self._lines[line.product.id] = line

    @classmethod
    def from_payload(cls, payload: Any, storage: Optional[CartStorage] = None, key: str = "cart") -> "CartEngine":
        engine = cls(storage=None, key=key)
        engine.load_payload(payload)
        engine.storage = storage
        return engine

    # ==================== Persistence ====================

    def _rehydrate(self) -> None:
        if self.storage is None:
            return

        try:
            raw = self.storage.load(self.key)
        except (CartStorageError, OSError) as e:
            logger.warning(f"Could not load cart {self.key}, starting empty: {e}")
            self.durably_saved = False
            return

        if raw is None:
            return

        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning(f"Stored cart {self.key} is not valid JSON, starting empty")
            self.durably_saved = False
            return

        self.load_payload(payload)

    def _persist(self) -> None:
        if self.storage is None:
            return

        try:
            self.storage.save(self.key, json.dumps(self.to_payload()))
            self.durably_saved = True
        except (CartStorageError, OSError) as e:
            # The in-memory cart stays authoritative for the rest of the session
            logger.warning(f"Could not persist cart {self.key}: {e}")
            self.durably_saved = False
