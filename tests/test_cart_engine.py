"""
Tests for the Cart Engine

Covers line uniqueness, quantity accumulation, totals, removal rules,
clearing, the persistence round trip, and the non-fatal storage contract.
"""

import json
import random

import pytest

from storefront.cart import CartEngine, CartStorage, CartStorageError, MemoryCartStorage
from storefront.models.cart import ProductSnapshot
from storefront.models.product import Product


def make_product(product_id: str, price: float, stock: int = 10, **extra) -> Product:
    return Product(id=product_id, name=f"Product {product_id}", price=price, stock=stock, **extra)


RING = make_product("ring", 1000.0)
PENDANT = make_product("pendant", 500.0)
BANGLE = make_product("bangle", 249.99)


class BrokenStorage(CartStorage):
    """Storage whose writes always fail"""

    def __init__(self, stored=None):
        self.stored = stored
        self.save_attempts = 0

    def load(self, key):
        return self.stored

    def save(self, key, data):
        self.save_attempts += 1
        raise CartStorageError("disk full")

    def delete(self, key):
        raise CartStorageError("disk full")


class TestConcreteScenario:
    """The reference walk-through from an empty cart to a cleared one"""

    def test_walkthrough(self):
        cart = CartEngine()

        cart.add_to_cart(RING)
        assert cart.total_items == 1
        assert cart.total_amount == 1000

        cart.add_to_cart(RING)
        assert cart.line_count == 1
        assert cart.get_line("ring").quantity == 2
        assert cart.total_amount == 2000

        cart.add_to_cart(PENDANT)
        assert cart.line_count == 2
        assert cart.total_amount == 2500

        cart.update_quantity("ring", 3)
        assert cart.total_amount == 3500

        cart.remove_from_cart("pendant")
        assert cart.total_amount == 3000
        assert cart.line_count == 1

        cart.clear_cart()
        assert cart.total_items == 0
        assert cart.total_amount == 0
        assert cart.items == []


class TestAddToCart:

    @pytest.mark.parametrize("seed", range(10))
    def test_at_most_one_line_per_product(self, seed):
        rng = random.Random(seed)
        products = [RING, PENDANT, BANGLE]
        sequence = [rng.choice(products) for _ in range(rng.randint(1, 30))]

        cart = CartEngine()
        for product in sequence:
            cart.add_to_cart(product)

        ids = [line.product.id for line in cart.items]
        assert len(ids) == len(set(ids))
        assert set(ids) == {p.id for p in sequence}
        for product in products:
            expected = sequence.count(product)
            line = cart.get_line(product.id)
            assert (line.quantity if line else 0) == expected

    def test_adding_twice_accumulates_quantity(self):
        cart = CartEngine()
        cart.add_to_cart(RING)
        cart.add_to_cart(RING)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_lines_keep_first_added_order(self):
        cart = CartEngine()
        for product in (PENDANT, RING, PENDANT, BANGLE):
            cart.add_to_cart(product)

        assert [line.product.id for line in cart.items] == ["pendant", "ring", "bangle"]

    def test_no_stock_check_on_add(self):
        """Stock is only captured, never enforced, when adding"""
        scarce = make_product("scarce", 100.0, stock=1)
        cart = CartEngine()
        for _ in range(3):
            cart.add_to_cart(scarce)

        line = cart.get_line("scarce")
        assert line.quantity == 3
        assert line.product.stock == 1

    def test_snapshot_is_not_live_linked(self):
        product = make_product("chain", 800.0)
        cart = CartEngine()
        cart.add_to_cart(product)

        product.price = 9999.0
        product.name = "Renamed"

        line = cart.get_line("chain")
        assert line.product.price == 800.0
        assert line.product.name == "Product chain"

    def test_returned_lines_are_copies(self):
        storage = MemoryCartStorage()
        cart = CartEngine(storage, key="k")

        added = cart.add_to_cart(RING)
        added.quantity = 50
        updated = cart.update_quantity("ring", 2)
        updated.quantity = 99

        assert cart.get_line("ring").quantity == 2
        assert json.loads(storage.entries["k"])[0]["quantity"] == 2

    def test_accepts_snapshot_directly(self):
        cart = CartEngine()
        cart.add_to_cart(ProductSnapshot(id="anklet", name="Anklet", price=350.0))
        assert cart.total_amount == 350.0


class TestTotals:

    @pytest.mark.parametrize("seed", range(10))
    def test_totals_match_lines(self, seed):
        rng = random.Random(seed)
        cart = CartEngine()
        products = [make_product(f"p{i}", round(rng.uniform(0, 5000), 2)) for i in range(5)]
        for product in products:
            cart.add_to_cart(product)
            cart.update_quantity(product.id, rng.randint(1, 7))

        lines = cart.items
        assert cart.total_items == sum(line.quantity for line in lines)
        assert cart.total_amount == round(sum(line.product.price * line.quantity for line in lines), 2)

    def test_total_rounded_to_minor_unit(self):
        cart = CartEngine()
        cart.add_to_cart(make_product("a", 0.1))
        cart.add_to_cart(make_product("b", 0.2))

        assert cart.total_amount == 0.3

    def test_totals_recomputed_on_each_access(self):
        cart = CartEngine()
        cart.add_to_cart(BANGLE)
        assert cart.total_amount == 249.99

        cart.update_quantity("bangle", 4)
        assert cart.total_items == 4
        assert cart.total_amount == 999.96


class TestUpdateAndRemove:

    def test_remove_ordered_subtracts_quantities(self):
        cart = CartEngine()
        cart.add_to_cart(RING)
        cart.add_to_cart(PENDANT)
        ordered = cart.items

        cart.add_to_cart(RING)
        cart.add_to_cart(BANGLE)
        cart.remove_from_cart("pendant")
        cart.remove_ordered(ordered)

        assert [(line.product.id, line.quantity) for line in cart.items] == [("ring", 1), ("bangle", 1)]

    @pytest.mark.parametrize("quantity", [0, -1, -50])
    def test_non_positive_quantity_removes_line(self, quantity):
        cart = CartEngine()
        cart.add_to_cart(RING)
        cart.add_to_cart(PENDANT)

        cart.update_quantity("ring", quantity)

        assert cart.get_line("ring") is None
        assert cart.line_count == 1

    def test_update_not_clamped_to_stock(self):
        cart = CartEngine()
        cart.add_to_cart(make_product("few", 10.0, stock=2))

        cart.update_quantity("few", 50)

        assert cart.get_line("few").quantity == 50

    def test_update_unknown_product_is_noop(self):
        cart = CartEngine()
        cart.add_to_cart(RING)

        assert cart.update_quantity("missing", 4) is None
        assert [line.product.id for line in cart.items] == ["ring"]

    def test_remove_absent_product_is_noop(self):
        cart = CartEngine()
        cart.add_to_cart(RING)

        cart.remove_from_cart("missing")
        cart.remove_from_cart("missing")

        assert cart.total_items == 1

    def test_items_are_copies(self):
        cart = CartEngine()
        cart.add_to_cart(RING)

        cart.items[0].quantity = 99

        assert cart.get_line("ring").quantity == 1


class TestClear:

    def test_clear_empties_fully(self):
        cart = CartEngine()
        for product in (RING, PENDANT, BANGLE, RING):
            cart.add_to_cart(product)

        cart.clear_cart()

        assert cart.total_items == 0
        assert cart.total_amount == 0
        assert cart.items == []
        assert cart.is_empty

    def test_clear_on_empty_cart(self):
        cart = CartEngine()
        cart.clear_cart()
        assert cart.is_empty


class TestPersistence:

    def test_payload_round_trip(self):
        cart = CartEngine()
        for product in (RING, PENDANT, RING, BANGLE):
            cart.add_to_cart(product)

        restored = CartEngine.from_payload(json.loads(json.dumps(cart.to_payload())))

        assert restored.items == cart.items
        assert restored.total_amount == cart.total_amount

    def test_mutations_are_persisted_and_rehydrated(self):
        storage = MemoryCartStorage()
        cart = CartEngine(storage, key="session-1")
        cart.add_to_cart(RING)
        cart.add_to_cart(PENDANT)
        cart.update_quantity("ring", 2)

        stored = json.loads(storage.entries["session-1"])
        assert [entry["product"]["id"] for entry in stored] == ["ring", "pendant"]
        assert stored[0]["quantity"] == 2

        rehydrated = CartEngine(storage, key="session-1")
        assert rehydrated.items == cart.items

    def test_carts_are_isolated_by_key(self):
        storage = MemoryCartStorage()
        CartEngine(storage, key="a").add_to_cart(RING)

        assert CartEngine(storage, key="b").is_empty

    def test_corrupt_storage_rehydrates_empty(self):
        storage = MemoryCartStorage()
        storage.entries["k"] = "{not json"

        cart = CartEngine(storage, key="k")

        assert cart.is_empty
        assert cart.durably_saved is False

    def test_rehydration_drops_malformed_lines_and_merges_duplicates(self):
        storage = MemoryCartStorage()
        snapshot = ProductSnapshot.from_product(RING).model_dump()
        storage.entries["k"] = json.dumps([
            {"product": snapshot, "quantity": 1},
            {"product": {"id": "broken"}, "quantity": 1},
            {"product": snapshot, "quantity": 2},
            {"product": ProductSnapshot.from_product(PENDANT).model_dump(), "quantity": 0},
            "garbage",
        ])

        cart = CartEngine(storage, key="k")

        assert cart.line_count == 1
        assert cart.get_line("ring").quantity == 3

    def test_non_list_payload_rehydrates_empty(self):
        storage = MemoryCartStorage()
        storage.entries["k"] = json.dumps({"ring": 1})

        assert CartEngine(storage, key="k").is_empty


class TestStorageFailures:
    """Storage problems are logged, never raised"""

    def test_save_failure_keeps_in_memory_cart(self, caplog):
        storage = BrokenStorage()
        cart = CartEngine(storage, key="k")

        cart.add_to_cart(RING)
        cart.add_to_cart(RING)

        assert cart.get_line("ring").quantity == 2
        assert cart.durably_saved is False
        assert storage.save_attempts == 2
        assert "Could not persist cart" in caplog.text

    def test_durably_saved_recovers(self):
        storage = MemoryCartStorage()
        cart = CartEngine(storage, key="k")
        original_save = storage.save

        def failing_save(key, data):
            raise OSError("read-only file system")

        storage.save = failing_save
        cart.add_to_cart(RING)
        assert cart.durably_saved is False

        storage.save = original_save
        cart.add_to_cart(PENDANT)
        assert cart.durably_saved is True
        assert len(json.loads(storage.entries["k"])) == 2

    def test_load_failure_starts_empty(self):
        class UnreadableStorage(MemoryCartStorage):
            def load(self, key):
                raise CartStorageError("permission denied")

        cart = CartEngine(UnreadableStorage(), key="k")

        assert cart.is_empty
        assert cart.durably_saved is False
