"""CLI commands for the wishlist."""

from __future__ import annotations

import asyncio

import click

from storefront.infrastructure.bootstrap import session_service, wishlist_reconciler


def _mutate(action) -> bool:
    reconciler = wishlist_reconciler(session_service())

    async def run() -> bool:
        changed = action(reconciler)
        await reconciler.mirror.drain()
        return changed

    return asyncio.run(run())


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
def wishlist_add(product_id: str) -> None:
    """Add a product to the wishlist."""
    if _mutate(lambda r: r.add(product_id)):
        click.echo(f"Added {product_id} to the wishlist.")
    else:
        click.echo(f"{product_id} is already wishlisted.")


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
def wishlist_remove(product_id: str) -> None:
    """Remove a product from the wishlist."""
    if _mutate(lambda r: r.remove(product_id)):
        click.echo(f"Removed {product_id} from the wishlist.")
    else:
        click.echo(f"{product_id} was not wishlisted.")


@click.command("list")
def wishlist_list() -> None:
    """Show wishlisted products."""
    wishlist = wishlist_reconciler(session_service()).wishlist
    if not len(wishlist):
        click.echo("Your wishlist is empty.")
        return
    for product_id in wishlist.product_ids:
        click.echo(product_id)
