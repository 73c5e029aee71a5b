"""Application service: pre-fills the shipping form for a signed-in shopper."""

from __future__ import annotations

import structlog

from storefront.application.checkout import CheckoutStateMachine
from storefront.application.remote_mirror import TRANSIENT_ERRORS
from storefront.domain.gateway.profile_directory import ProfileDirectory
from storefront.domain.model.identity import Session
from storefront.domain.model.profile import CustomerProfile, state_code

logger = structlog.get_logger(__name__)


def shipping_fields_from(session: Session, profile: CustomerProfile | None) -> dict[str, str]:
    """Build shipping form values from the session and the saved profile.

    Only non-empty values are returned, so existing input is never blanked.
    """
    fields: dict[str, str] = {}
    if session.email:
        fields["email"] = session.email
    if profile is None:
        return fields

    for name in ("first_name", "last_name", "phone"):
        value = getattr(profile, name)
        if value:
            fields[name] = value

    address = profile.default_address
    if address is None:
        return fields
    if address.address_line_1:
        fields["address"] = address.address_line_1
    if address.address_line_2:
        fields["apartment"] = address.address_line_2
    if address.city:
        fields["city"] = address.city
    if address.state:
        fields["state"] = state_code(address.state)
    if address.postal_code:
        fields["postal_code"] = address.postal_code
    if address.country:
        fields["country"] = address.country
    return fields


class ShippingAutofill:

    def __init__(self, profiles: ProfileDirectory, checkout: CheckoutStateMachine) -> None:
        self._profiles = profiles
        self._checkout = checkout

    async def fill(self, session: Session) -> dict[str, str]:
        try:
            profile = await self._profiles.get_profile(session.user_id)
        except TRANSIENT_ERRORS as exc:
            logger.warning("Profile lookup failed", user_id=session.user_id, error=str(exc))
            profile = None

        fields = shipping_fields_from(session, profile)
        if profile is None:
            logger.info("No saved profile, filling email only", user_id=session.user_id)
        if fields:
            self._checkout.update_shipping_info(**fields)
        return fields
