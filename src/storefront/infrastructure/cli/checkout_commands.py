"""CLI commands for checkout."""

from __future__ import annotations

import asyncio

import click

from storefront.application.checkout import CheckoutStateMachine
from storefront.application.session_discovery import SessionDiscovery
from storefront.application.shipping_autofill import ShippingAutofill
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import CheckoutTotals, PaymentMethod, ShippingMethod
from storefront.infrastructure.bootstrap import (
    cart_reconciler,
    checkout,
    profile_directory,
    session_service,
)
from storefront.infrastructure.cli.cart_commands import display_cart

_METHODS = click.Choice([m.value for m in ShippingMethod])


def _display_totals(totals: CheckoutTotals) -> None:
    click.echo(f"  {'Subtotal':<20} {str(totals.subtotal):>16}")
    click.echo(f"  {'Shipping':<20} {str(totals.shipping_cost):>16}")
    click.echo(f"  {'Tax (18% GST)':<20} {str(totals.tax):>16}")
    click.echo(f"  {'-'*37}")
    click.echo(f"  {'Total':<20} {str(totals.total):>16}")


def _raise_for(exc: DomainException) -> None:
    if isinstance(exc, ValidationError) and exc.field_errors:
        details = "\n".join(f"  {name}: {msg}" for name, msg in exc.field_errors.items())
        raise click.ClickException(f"{exc}\n{details}")
    raise click.ClickException(str(exc))


async def _quote(machine: CheckoutStateMachine, pincode: str, method: str) -> None:
    machine.select_shipping_method(ShippingMethod(method))
    machine.update_shipping_info(postal_code=pincode)
    await machine.rates.refresh()


@click.command("quote")
@click.option("--pincode", required=True, help="6-digit destination PIN code.")
@click.option("--method", type=_METHODS, default="standard", show_default=True)
def checkout_quote(pincode: str, method: str) -> None:
    """Show shipping options and order totals for the current cart."""
    machine = checkout(cart_reconciler(session_service()))
    asyncio.run(_quote(machine, pincode, method))

    if machine.rates.message and not machine.rates.options:
        click.echo(machine.rates.message)
    for option in machine.rates.options:
        click.echo(f"  {option.method.value:<10} {str(option.cost):>10}  {option.estimated_delivery}")
    click.echo()
    _display_totals(machine.totals)


@click.command("place")
@click.option("--first-name", default="")
@click.option("--last-name", default="")
@click.option("--email", default="")
@click.option("--phone", default="")
@click.option("--address", default="")
@click.option("--apartment", default="")
@click.option("--city", default="")
@click.option("--state", default="")
@click.option("--pincode", default="", help="6-digit PIN code.")
@click.option("--method", type=_METHODS, default="standard", show_default=True)
@click.option("--upi", "upi_id", default=None, help="Pay by UPI with this ID.")
@click.option("--paypal", "paypal_email", default=None, help="Pay by PayPal with this email.")
@click.option("--bill-address", default="", help="Separate billing address (defaults to shipping).")
@click.option("--bill-city", default="")
@click.option("--bill-state", default="")
@click.option("--bill-pincode", default="")
def checkout_place(
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    address: str,
    apartment: str,
    city: str,
    state: str,
    pincode: str,
    method: str,
    upi_id: str | None,
    paypal_email: str | None,
    bill_address: str,
    bill_city: str,
    bill_state: str,
    bill_pincode: str,
) -> None:
    """Run shipping and payment steps and place the order.

    When signed in, the shipping form is first filled from the saved
    profile; options given here override those values.
    """
    if bool(upi_id) == bool(paypal_email):
        raise click.ClickException("Choose exactly one of --upi or --paypal")

    sessions = session_service()
    cart = cart_reconciler(sessions)
    machine = checkout(cart)
    given = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "address": address,
        "apartment": apartment,
        "city": city,
        "state": state,
        "postal_code": pincode,
    }

    async def run():
        autofill = ShippingAutofill(profile_directory(), machine)
        discovery = SessionDiscovery(sessions, autofill.fill, max_attempts=1)
        discovery.start()
        try:
            await discovery.wait()
        finally:
            discovery.close()

        machine.select_shipping_method(ShippingMethod(method))
        overrides = {name: value for name, value in given.items() if value}
        if overrides:
            machine.update_shipping_info(**overrides)
        await machine.rates.refresh()
        machine.submit_shipping()
        if upi_id:
            machine.update_payment_info(method=PaymentMethod.UPI, upi_id=upi_id)
        else:
            machine.update_payment_info(method=PaymentMethod.PAYPAL, paypal_email=paypal_email)
        if bill_address:
            shipping = machine.state.shipping_info
            machine.update_billing_info(
                same_as_shipping=False,
                first_name=shipping.first_name,
                last_name=shipping.last_name,
                address=bill_address,
                city=bill_city,
                state=bill_state,
                postal_code=bill_pincode,
            )
        placed = await machine.submit_payment()
        await cart.mirror.drain()
        return placed

    try:
        placed = asyncio.run(run())
    except DomainException as exc:
        _raise_for(exc)

    start, end = placed.estimated_delivery
    click.echo(f"Order {placed.order_number} confirmed.")
    click.echo()
    display_cart(Cart(placed.lines))
    _display_totals(placed.totals)
    click.echo()
    click.echo(f"Estimated delivery: {start:%d %B %Y} - {end:%d %B %Y}")
