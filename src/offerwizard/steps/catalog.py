"""The energy offer step catalogue.

Declares the offer wizard steps in wizard order, with their dependencies
and visibility rules. Rules read the ``offerDetails`` and ``discounts``
sections, so changing the market or offer type reshapes the wizard.
"""

from __future__ import annotations

from typing import Final

from offerwizard.constants import (
    DISCOUNT_TYPE_REGULATED,
    MARKET_DUAL_FUEL,
    MARKET_ELECTRICITY,
    MARKET_GAS,
    OFFER_FLAT,
    OFFER_VARIABLE,
)
from offerwizard.steps.models import Step
from offerwizard.steps.registry import StepRegistry
from offerwizard.steps.visibility import (
    FieldEquals,
    FieldIn,
    NoItemMatches,
    Not,
    all_of,
    any_of,
)

__all__ = [
    "OFFER_STEPS",
    "MARKET_TYPE_PATH",
    "OFFER_TYPE_PATH",
    "build_offer_registry",
]

MARKET_TYPE_PATH: Final[str] = "offerDetails.TIPO_MERCATO"
OFFER_TYPE_PATH: Final[str] = "offerDetails.TIPO_OFFERTA"

# Consumption limits apply to flat offers, power limits to electricity
OFFER_CHARACTERISTICS_VISIBLE = any_of(
    FieldEquals(OFFER_TYPE_PATH, OFFER_FLAT),
    FieldEquals(MARKET_TYPE_PATH, MARKET_ELECTRICITY),
)

REGULATED_COMPONENTS_VISIBLE = FieldIn(
    MARKET_TYPE_PATH, (MARKET_ELECTRICITY, MARKET_GAS)
)

# A regulated (type 04) discount replaces the price index
ENERGY_PRICE_REFERENCES_VISIBLE = all_of(
    FieldEquals(OFFER_TYPE_PATH, OFFER_VARIABLE),
    NoItemMatches("discounts", "TIPOLOGIA", DISCOUNT_TYPE_REGULATED),
)

TIME_BANDS_VISIBLE = all_of(
    FieldEquals(MARKET_TYPE_PATH, MARKET_ELECTRICITY),
    Not(FieldEquals(OFFER_TYPE_PATH, OFFER_FLAT)),
)

DUAL_OFFERS_VISIBLE = FieldEquals(MARKET_TYPE_PATH, MARKET_DUAL_FUEL)

_IDENTIFICATION = ("identification",)
_OFFER_DETAILS = ("offer-details",)

OFFER_STEPS: Final[tuple[Step, ...]] = (
    Step(
        id="identification",
        title="Identification Information",
        description="Enter VAT number and offer code",
    ),
    Step(
        id="offer-basic",
        title="Basic Information",
        description="Enter basic offer details",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="offer-details",
        title="Offer Details",
        description="Configure market type, client type, and other offer specifications",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="offer-characteristics",
        title="Offer Characteristics",
        description="Define consumption and power limits for this offer",
        depends_on=_OFFER_DETAILS,
        visibility=OFFER_CHARACTERISTICS_VISIBLE,
    ),
    Step(
        id="activation-methods",
        title="Activation Methods",
        description="Define how customers can activate this offer",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="contact-information",
        title="Contact Information",
        description="Customer service phone number and relevant URLs",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="offer-validity",
        title="Offer Validity Period",
        description="Set the start and end dates for this offer",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="payment-methods",
        title="Payment Methods",
        description="Select accepted payment methods for this offer",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="regulated-components",
        title="Regulated Components",
        description="Select authority-defined price components (optional)",
        optional=True,
        depends_on=_OFFER_DETAILS,
        visibility=REGULATED_COMPONENTS_VISIBLE,
    ),
    Step(
        id="energy-price-references",
        title="Energy Price References",
        description="Price index selection for variable offers",
        depends_on=_OFFER_DETAILS,
        visibility=ENERGY_PRICE_REFERENCES_VISIBLE,
    ),
    Step(
        id="time-bands",
        title="Price Type & Time Bands",
        description="Configure time band types and weekly schedules",
        depends_on=_OFFER_DETAILS,
        visibility=TIME_BANDS_VISIBLE,
    ),
    Step(
        id="dual-offers",
        title="Dual Fuel Offer",
        description="Link electricity and gas offers for dual fuel package",
        depends_on=_OFFER_DETAILS,
        visibility=DUAL_OFFERS_VISIBLE,
    ),
    Step(
        id="contractual-conditions",
        title="Contractual Conditions",
        description="Specify terms and conditions for the offer",
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="offer-zones",
        title="Offer Zones",
        description="Specify geographical availability via regions, provinces, municipalities",
        optional=True,
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="issuer-details",
        title="Issuer Details",
        description="Company information for the offer issuer",
    ),
    Step(
        id="recipient-details",
        title="Recipient Details",
        description="Customer or recipient company information",
    ),
    Step(
        id="energy-type",
        title="Energy Type",
        description="Select the type of energy service",
    ),
    Step(
        id="consumption-profile",
        title="Consumption Profile",
        description="Define energy consumption patterns",
        depends_on=("energy-type",),
    ),
    Step(
        id="discounts",
        title="Discounts & Promotions",
        description="Apply any discounts or promotional rates",
        optional=True,
    ),
    Step(
        id="additional-services",
        title="Additional Products & Services",
        description="Optional products and services to enhance your offer",
        optional=True,
        depends_on=_IDENTIFICATION,
    ),
    Step(
        id="company-components",
        title="Company Components",
        description="Define custom pricing components for your offer",
    ),
)


def build_offer_registry() -> StepRegistry:
    """Build a registry for the energy offer wizard."""
    return StepRegistry(OFFER_STEPS)
