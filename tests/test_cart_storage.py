"""Tests for cart storage backends"""

import pytest

from storefront.cart import (
    CartEngine,
    CartStorageError,
    FileCartStorage,
    MemoryCartStorage,
    create_cart_storage,
)
from storefront.models.product import Product


class TestFileCartStorage:

    def test_save_load_delete(self, tmp_path):
        storage = FileCartStorage(tmp_path / "carts")

        assert storage.load("abc") is None
        storage.save("abc", '[{"x": 1}]')
        assert storage.load("abc") == '[{"x": 1}]'

        storage.delete("abc")
        assert storage.load("abc") is None
        storage.delete("abc")

    def test_keys_cannot_escape_directory(self, tmp_path):
        directory = tmp_path / "carts"
        storage = FileCartStorage(directory)

        storage.save("../../etc/passwd", "[]")

        written = list(directory.iterdir())
        assert len(written) == 1
        assert written[0].parent == directory
        assert written[0].name.startswith("cart-")

    def test_empty_key_rejected(self, tmp_path):
        with pytest.raises(CartStorageError):
            FileCartStorage(tmp_path).save("", "[]")

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = FileCartStorage(tmp_path)
        for i in range(3):
            storage.save("k", f"[{i}]")

        assert [p.name for p in tmp_path.iterdir()] == ["cart-k.json"]
        assert storage.load("k") == "[2]"

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")

        with pytest.raises(CartStorageError):
            FileCartStorage(blocker).save("k", "[]")

    def test_cart_survives_new_engine(self, tmp_path):
        """A cart written by one engine is read back by the next one"""
        storage = FileCartStorage(tmp_path)
        product = Product(id="ring", name="Ring", price=1200.0, stock=3)

        first = CartEngine(storage, key="session")
        first.add_to_cart(product)
        first.add_to_cart(product)

        second = CartEngine(FileCartStorage(tmp_path), key="session")
        assert second.get_line("ring").quantity == 2
        assert second.total_amount == 2400.0

    def test_undecodable_file_raises_storage_error(self, tmp_path):
        (tmp_path / "cart-abc.json").write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(CartStorageError):
            FileCartStorage(tmp_path).load("abc")

    def test_engine_starts_empty_on_undecodable_file(self, tmp_path):
        (tmp_path / "cart-abc.json").write_bytes(b"\xff\xfe\x00garbage")

        cart = CartEngine(FileCartStorage(tmp_path), key="abc")

        assert cart.is_empty
        assert cart.durably_saved is False

        cart.add_to_cart(Product(id="ring", name="Ring", price=10.0))
        assert cart.durably_saved is True
        assert CartEngine(FileCartStorage(tmp_path), key="abc").total_items == 1

    def test_engine_tolerates_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        cart = CartEngine(FileCartStorage(blocker), key="k")

        cart.add_to_cart(Product(id="ring", name="Ring", price=10.0))

        assert cart.total_items == 1
        assert cart.durably_saved is False


class TestMemoryCartStorage:

    def test_delete_missing_key(self):
        storage = MemoryCartStorage()
        storage.save("a", "[]")
        storage.delete("a")
        storage.delete("a")
        assert storage.entries == {}


class TestCreateCartStorage:

    def test_backends(self, tmp_path):
        assert isinstance(create_cart_storage("memory", str(tmp_path)), MemoryCartStorage)
        file_storage = create_cart_storage("file", str(tmp_path))
        assert isinstance(file_storage, FileCartStorage)
        assert file_storage.directory == tmp_path

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError):
            create_cart_storage("redis", str(tmp_path))
