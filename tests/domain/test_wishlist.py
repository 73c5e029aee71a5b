"""Unit tests for the Wishlist snapshot."""

from storefront.domain.model.wishlist import Wishlist, merge_wishlists


class TestWishlist:

    def test_of_drops_duplicates(self):
        assert Wishlist.of(["P1", "P2", "P1"]).product_ids == ("P1", "P2")

    def test_add_existing_is_noop(self):
        wishlist = Wishlist.of(["P1"])
        assert wishlist.with_added("P1") is wishlist

    def test_without(self):
        assert "P1" not in Wishlist.of(["P1", "P2"]).without("P1")

    def test_merge_is_set_union(self):
        merged = merge_wishlists(Wishlist.of(["P1", "P2"]), Wishlist.of(["P2", "P3"]))
        assert merged.as_set() == {"P1", "P2", "P3"}
        assert merge_wishlists(merged, Wishlist.of(["P2", "P3"])).as_set() == merged.as_set()
