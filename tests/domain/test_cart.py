"""Unit tests for the Cart snapshot and the local/remote merge."""

from storefront.domain.model.cart import Cart, merge_carts
from storefront.domain.model.value_objects import Money, Quantity
from tests.fakes import make_line


class TestCartAdd:

    def test_new_key_appends_line(self):
        cart = Cart().with_added(make_line("P1", "M", 2))
        assert len(cart.lines) == 1
        assert cart.get(("P1", "M")).quantity == Quantity(2)

    def test_same_key_sums_quantities(self):
        cart = Cart().with_added(make_line("P1", "M", 2)).with_added(make_line("P1", "M", 3))
        assert len(cart.lines) == 1
        assert cart.get(("P1", "M")).quantity == Quantity(5)

    def test_other_variant_is_separate_line(self):
        cart = Cart().with_added(make_line("P1", "M")).with_added(make_line("P1", "L"))
        assert cart.keys() == {("P1", "M"), ("P1", "L")}

    def test_of_folds_duplicate_rows(self):
        cart = Cart.of([make_line("P1", "M", 1), make_line("P1", "M", 4)])
        assert cart.get(("P1", "M")).quantity == Quantity(5)


class TestCartQueries:

    def test_subtotal_and_item_count(self):
        cart = Cart.of([
            make_line("P1", "M", 2, price="250.00"),
            make_line("P2", "S", 1, price="500.00"),
        ])
        assert cart.subtotal == Money.of("1000.00")
        assert cart.item_count == 3

    def test_empty_cart(self):
        assert Cart().is_empty
        assert Cart().subtotal == Money.of("0")


class TestCartUpdateAndRemove:

    def test_with_quantity_replaces_in_place(self):
        cart = Cart.of([make_line("P1", "M", 2), make_line("P2", "S", 1)])
        updated = cart.with_quantity(("P1", "M"), Quantity(7))
        assert [line.key for line in updated.lines] == [("P1", "M"), ("P2", "S")]
        assert updated.get(("P1", "M")).quantity == Quantity(7)

    def test_with_quantity_on_missing_key_is_noop(self):
        cart = Cart.of([make_line("P1", "M")])
        assert cart.with_quantity(("P9", "M"), Quantity(3)) == cart

    def test_without_missing_key_is_noop(self):
        cart = Cart.of([make_line("P1", "M")])
        assert cart.without(("P9", "X")) == cart


class TestMergeCarts:

    def test_union_of_disjoint_carts(self):
        local = Cart.of([make_line("P1", "M")])
        remote = Cart.of([make_line("P2", "S")])
        assert merge_carts(local, remote).keys() == {("P1", "M"), ("P2", "S")}

    def test_remote_wins_on_shared_key(self):
        local = Cart.of([make_line("P1", "M", 2)])
        remote = Cart.of([make_line("P1", "M", 5)])
        merged = merge_carts(local, remote)
        assert merged.get(("P1", "M")).quantity == Quantity(5)
        assert len(merged.lines) == 1

    def test_merge_is_idempotent(self):
        local = Cart.of([make_line("P1", "M", 2), make_line("P3", "L", 1)])
        remote = Cart.of([make_line("P1", "M", 4), make_line("P2", "S", 1)])
        once = merge_carts(local, remote)
        assert merge_carts(once, remote) == once
        assert merge_carts(once, once) == once
