"""CLI commands for the cart."""

from __future__ import annotations

import asyncio

import click

from storefront.application.cart_reconciler import CartReconciler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.bootstrap import cart_reconciler, session_service


def _mutate(action) -> object:
    """Run a cart mutation and wait for its remote mirror to settle."""
    reconciler = cart_reconciler(session_service())

    async def run() -> object:
        result = action(reconciler)
        await reconciler.mirror.drain()
        return result

    try:
        return asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))


def display_cart(cart: Cart) -> None:
    """Shared formatting for displaying a cart."""
    if cart.is_empty:
        click.echo("Your cart is empty.")
        return
    click.echo(f"  {'Product':<12} {'Variant':<10} {'Name':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*76}")
    for line in cart.lines:
        click.echo(
            f"  {line.product_id:<12} {line.variant_key:<10} {line.name:<20} "
            f"{line.quantity.value:>5} {str(line.unit_price):>12} {str(line.line_total):>12}"
        )
    click.echo(f"  {'-'*76}")
    click.echo(f"  {'Subtotal':<49} {str(cart.subtotal):>27}")


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", default="", help="Variant key (e.g. size or colour).")
@click.option("--qty", default=1, type=int, show_default=True, help="Quantity to add.")
@click.option("--price", required=True, help="Unit price (e.g. 499.00).")
@click.option("--name", default="", help="Product name.")
def cart_add(product_id: str, variant: str, qty: int, price: str, name: str) -> None:
    """Add a product variant to the cart."""

    def action(reconciler: CartReconciler) -> CartLine:
        line = CartLine(
            product_id=product_id,
            variant_key=variant,
            quantity=Quantity(qty),
            unit_price=Money.of(price),
            name=name,
        )
        return reconciler.add(line)

    line = _mutate(action)
    click.echo(f"{line.product_id} ({line.variant_key or '-'}) now x{line.quantity}")


@click.command("list")
def cart_list() -> None:
    """Show the cart."""
    display_cart(cart_reconciler(session_service()).cart)


@click.command("update")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", default="", help="Variant key.")
@click.option("--qty", required=True, type=int, help="New quantity (at least 1).")
def cart_update(product_id: str, variant: str, qty: int) -> None:
    """Change the quantity of a cart line."""
    line = _mutate(lambda r: r.update_quantity(product_id, variant, qty))
    if line is None:
        raise click.ClickException(f"{product_id} ({variant or '-'}) is not in the cart")
    click.echo(f"{product_id} ({variant or '-'}) now x{line.quantity}")


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", default="", help="Variant key.")
def cart_remove(product_id: str, variant: str) -> None:
    """Remove a cart line."""
    if _mutate(lambda r: r.remove(product_id, variant)):
        click.echo(f"Removed {product_id} ({variant or '-'}).")
    else:
        click.echo(f"{product_id} ({variant or '-'}) was not in the cart.")


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    _mutate(lambda r: r.clear())
    click.echo("Cart cleared.")
