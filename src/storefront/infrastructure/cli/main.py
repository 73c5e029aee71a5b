import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_list,
    cart_remove,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import checkout_place, checkout_quote
from storefront.infrastructure.cli.session_commands import (
    session_login,
    session_logout,
    session_profile,
    session_status,
)
from storefront.infrastructure.cli.wishlist_commands import (
    wishlist_add,
    wishlist_list,
    wishlist_remove,
)
from storefront.infrastructure.logging import configure_logging


@click.group()
@click.option("--log-level", default="WARNING", show_default=True, help="Log level for stderr.")
def cli(log_level: str) -> None:
    """Storefront cart, wishlist and checkout (development harness)."""
    configure_logging(log_level)


@cli.group()
def cart() -> None:
    """Manage the shopping cart."""


@cli.group()
def wishlist() -> None:
    """Manage the wishlist."""


@cli.group()
def session() -> None:
    """Sign in and out."""


@cli.group()
def checkout() -> None:
    """Quote and place orders."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_list)
cart.add_command(cart_remove)
cart.add_command(cart_update)
wishlist.add_command(wishlist_add)
wishlist.add_command(wishlist_list)
wishlist.add_command(wishlist_remove)
session.add_command(session_login)
session.add_command(session_logout)
session.add_command(session_profile)
session.add_command(session_status)
checkout.add_command(checkout_place)
checkout.add_command(checkout_quote)
