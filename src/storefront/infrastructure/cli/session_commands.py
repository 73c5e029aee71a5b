"""CLI commands for signing in and out."""

from __future__ import annotations

import asyncio

import click

from storefront.application.identity_tracker import IdentityTracker
from storefront.domain.model.profile import CustomerProfile, SavedAddress
from storefront.infrastructure.bootstrap import (
    cart_reconciler,
    profile_directory,
    session_service,
    wishlist_reconciler,
)


@click.command("login")
@click.option("--user", "user_id", required=True, help="User ID to sign in as.")
@click.option("--email", default=None, help="Email address for the session.")
def session_login(user_id: str, email: str | None) -> None:
    """Sign in and merge the local cart and wishlist into the account."""
    sessions = session_service()
    cart = cart_reconciler(sessions)
    wishlist = wishlist_reconciler(sessions)

    async def run() -> None:
        tracker = IdentityTracker(sessions, cart, wishlist)
        tracker.start()
        try:
            sessions.sign_in(user_id, email)
            await tracker.wait_idle()
        finally:
            tracker.close()

    asyncio.run(run())
    click.echo(f"Signed in as {user_id}.")
    click.echo(f"Cart: {cart.cart.item_count} item(s), wishlist: {len(wishlist.wishlist)} product(s).")


@click.command("logout")
def session_logout() -> None:
    """Sign out; the local cart and wishlist stay as they are."""
    session_service().sign_out()
    click.echo("Signed out.")


@click.command("status")
def session_status() -> None:
    """Show who is signed in."""
    session = session_service().current()
    if session is None:
        click.echo("Not signed in (guest).")
    else:
        click.echo(f"Signed in as {session.user_id}" + (f" <{session.email}>" if session.email else ""))


@click.command("profile")
@click.option("--first-name", default="")
@click.option("--last-name", default="")
@click.option("--phone", default="")
@click.option("--address", default="", help="Address line 1.")
@click.option("--apartment", default="", help="Address line 2.")
@click.option("--city", default="")
@click.option("--state", default="", help="State name or code.")
@click.option("--pincode", default="")
@click.option("--country", default="India", show_default=True)
def session_profile(
    first_name: str,
    last_name: str,
    phone: str,
    address: str,
    apartment: str,
    city: str,
    state: str,
    pincode: str,
    country: str,
) -> None:
    """Save the signed-in customer's profile and default address."""
    session = session_service().current()
    if session is None:
        raise click.ClickException("Sign in first")

    default_address = SavedAddress(
        address_line_1=address,
        address_line_2=apartment,
        city=city,
        state=state,
        postal_code=pincode,
        country=country,
        is_default=True,
    )
    profile = CustomerProfile(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        addresses=(default_address,),
    )
    profile_directory().save_profile(session.user_id, profile)
    click.echo(f"Profile saved for {session.user_id}.")
