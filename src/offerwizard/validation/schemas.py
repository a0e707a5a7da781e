"""Default offer validators.

Pydantic models validate the identification, offer details and offer
validity sections; named cross-field rules check constraints spanning
several sections. ``default_validation_registry()`` wires them together.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from offerwizard.constants import (
    MARKET_DUAL_FUEL,
    MARKET_ELECTRICITY,
    MARKET_GAS,
    OFFER_FLAT,
    OFFER_VARIABLE,
)
from offerwizard.steps.catalog import ENERGY_PRICE_REFERENCES_VISIBLE
from offerwizard.validation.models import ValidationContext, ValidationError
from offerwizard.validation.registry import ValidationRegistry

__all__ = [
    "IdentificationSchema",
    "OfferDetailsSchema",
    "OfferValiditySchema",
    "OFFER_DATE_FORMAT",
    "parse_offer_date",
    "CROSS_FIELD_RULES",
    "default_validation_registry",
]

#: Offer dates are written as ``DD/MM/YYYY_HH:MM:SS``
OFFER_DATE_FORMAT = "%d/%m/%Y_%H:%M:%S"
_OFFER_DATE_PATTERN = r"^\d{2}/\d{2}/\d{4}_\d{2}:\d{2}:\d{2}$"
_ALPHANUMERIC = r"^[A-Z0-9]+$"

_CLIENT_CONDOMINIUM = "03"
_OTHER = "99"


def parse_offer_date(value: str) -> datetime | None:
    """Parse an offer date, returning None when it is malformed."""
    try:
        return datetime.strptime(value, OFFER_DATE_FORMAT)
    except (TypeError, ValueError):
        return None


# =============================================================================
# Section schemas
# =============================================================================


class IdentificationSchema(BaseModel):
    """Operator VAT number and offer code.

    Attributes:
        PIVA_UTENTE: Exactly 16 upper-case alphanumeric characters.
        COD_OFFERTA: 1 to 32 upper-case alphanumeric characters.
    """

    model_config = ConfigDict(extra="allow")

    PIVA_UTENTE: str = Field(min_length=16, max_length=16, pattern=_ALPHANUMERIC)
    COD_OFFERTA: str = Field(min_length=1, max_length=32, pattern=_ALPHANUMERIC)


class OfferDetailsSchema(BaseModel):
    """Market, client and offer classification."""

    model_config = ConfigDict(extra="allow")

    TIPO_MERCATO: str = Field(pattern=r"^0[1-3]$")
    TIPO_CLIENTE: str = Field(min_length=1)
    TIPO_OFFERTA: str = Field(pattern=r"^0[1-3]$")
    OFFERTA_SINGOLA: str | None = None
    DOMESTICO_RESIDENTE: str | None = None
    NOME_OFFERTA: str = Field(min_length=1, max_length=255)
    DESCRIZIONE: str = Field(min_length=1, max_length=3000)
    DURATA: int = Field(ge=-1, le=99)
    GARANZIE: str = Field(min_length=1, max_length=3000)


class OfferValiditySchema(BaseModel):
    """Offer validity window.

    The end date is optional; when given it must follow the start date.
    """

    model_config = ConfigDict(extra="allow")

    DATA_INIZIO: str = Field(pattern=_OFFER_DATE_PATTERN)
    DATA_FINE: str | None = Field(default=None, pattern=_OFFER_DATE_PATTERN)

    @model_validator(mode="after")
    def check_dates_parse(self) -> OfferValiditySchema:
        for name in ("DATA_INIZIO", "DATA_FINE"):
            value = getattr(self, name)
            if value and parse_offer_date(value) is None:
                raise ValueError(f"{name} is not a valid calendar date")
        return self


# =============================================================================
# Cross-field rules
# =============================================================================


def _section(context: ValidationContext, name: str) -> Mapping[str, Any]:
    data = context.section(name)
    return data if isinstance(data, Mapping) else {}


def _missing(value: Any) -> bool:
    return value is None or value == "" or value == []


def single_offer_required(context: ValidationContext) -> ValidationError | None:
    """Non-dual-fuel markets must state whether the offer is sold alone."""
    market = context.market_type
    details = _section(context, "offerDetails")
    if market and market != MARKET_DUAL_FUEL and _missing(details.get("OFFERTA_SINGOLA")):
        return ValidationError.for_field(
            "offerDetails",
            "OFFERTA_SINGOLA",
            "Single offer selection required for non-dual fuel offers",
        )
    return None


def price_index_required(context: ValidationContext) -> ValidationError | None:
    """Variable offers need a price index unless a regulated discount applies."""
    if context.offer_type != OFFER_VARIABLE:
        return None
    if not ENERGY_PRICE_REFERENCES_VISIBLE(context.form_data):
        return None
    references = _section(context, "energyPriceReferences")
    if _missing(references.get("IDX_PREZZO_ENERGIA")):
        return ValidationError.for_field(
            "energyPriceReferences",
            "IDX_PREZZO_ENERGIA",
            "Price index required for variable offers without regulated discount",
        )
    return None


def flat_offer_limits(context: ValidationContext) -> ValidationError | None:
    """Flat offers need consumption limits with min not above max."""
    if context.offer_type != OFFER_FLAT:
        return None
    characteristics = _section(context, "offerCharacteristics")
    minimum = characteristics.get("CONSUMO_MIN")
    maximum = characteristics.get("CONSUMO_MAX")
    if minimum is None or maximum is None:
        return ValidationError.for_field(
            "offerCharacteristics",
            "CONSUMO_MIN",
            "Consumption limits required for FLAT offers",
        )
    if maximum < minimum:
        return ValidationError.for_field(
            "offerCharacteristics",
            "CONSUMO_MAX",
            "Maximum consumption must not be below minimum consumption",
        )
    return None


def residential_condominium(context: ValidationContext) -> ValidationError | None:
    client = _section(context, "offerDetails").get("TIPO_CLIENTE")
    if client == _CLIENT_CONDOMINIUM and context.market_type != MARKET_GAS:
        return ValidationError.for_field(
            "offerDetails",
            "TIPO_CLIENTE",
            "Residential condominium is only available for gas market",
        )
    return None


def power_limits(context: ValidationContext) -> ValidationError | None:
    if context.market_type != MARKET_ELECTRICITY:
        return None
    characteristics = _section(context, "offerCharacteristics")
    minimum = characteristics.get("POTENZA_MIN")
    maximum = characteristics.get("POTENZA_MAX")
    if minimum is not None and maximum is not None and maximum <= minimum:
        return ValidationError.for_field(
            "offerCharacteristics",
            "POTENZA_MAX",
            "Maximum power must be greater than minimum power",
        )
    return None


def validity_period(context: ValidationContext) -> ValidationError | None:
    validity = _section(context, "offerValidity")
    start = parse_offer_date(validity.get("DATA_INIZIO") or "")
    end = parse_offer_date(validity.get("DATA_FINE") or "")
    if start is not None and end is not None and end <= start:
        return ValidationError.for_field(
            "offerValidity", "DATA_FINE", "End date must be after start date"
        )
    return None


def dual_offer_links(context: ValidationContext) -> ValidationError | None:
    if context.market_type != MARKET_DUAL_FUEL:
        return None
    dual = _section(context, "dualOffers")
    if _missing(dual.get("OFFERTE_CONGIUNTE_EE")):
        return ValidationError.for_field(
            "dualOffers",
            "OFFERTE_CONGIUNTE_EE",
            "Electricity offer codes required for dual fuel",
        )
    if _missing(dual.get("OFFERTE_CONGIUNTE_GAS")):
        return ValidationError.for_field(
            "dualOffers",
            "OFFERTE_CONGIUNTE_GAS",
            "Gas offer codes required for dual fuel",
        )
    return None


def other_descriptions(context: ValidationContext) -> ValidationError | None:
    """Selecting "other" (99) requires a free-text description."""
    checks = (
        ("activationMethods", "MODALITA", "DESCRIZIONE"),
        ("paymentMethods", "MODALITA_PAGAMENTO", "DESCRIZIONE"),
    )
    for section, choices, description in checks:
        data = _section(context, section)
        selected = data.get(choices) or ()
        if _OTHER in selected and _missing(data.get(description)):
            return ValidationError.for_field(
                section, description, "Description required when 'Other' is selected"
            )
    references = _section(context, "energyPriceReferences")
    if references.get("IDX_PREZZO_ENERGIA") == _OTHER and _missing(
        references.get("ALTRO")
    ):
        return ValidationError.for_field(
            "energyPriceReferences", "ALTRO", "Description required for custom index"
        )
    return None


#: name -> (validator, section a crash is reported on)
CROSS_FIELD_RULES = {
    "single_offer_required": (single_offer_required, "offerDetails"),
    "price_index_required": (price_index_required, "energyPriceReferences"),
    "flat_offer_limits": (flat_offer_limits, "offerCharacteristics"),
    "residential_condominium": (residential_condominium, "offerDetails"),
    "power_limits": (power_limits, "offerCharacteristics"),
    "validity_period": (validity_period, "offerValidity"),
    "dual_offer_links": (dual_offer_links, "dualOffers"),
    "other_descriptions": (other_descriptions, None),
}


def default_validation_registry() -> ValidationRegistry:
    """Build a registry with the offer schemas and cross-field rules."""
    registry = ValidationRegistry()
    registry.register_schema("identification", IdentificationSchema)
    registry.register_schema("offerDetails", OfferDetailsSchema)
    registry.register_schema("offerValidity", OfferValiditySchema)
    for name, (validator, section) in CROSS_FIELD_RULES.items():
        registry.register_cross_field_validator(name, validator, section=section)
    return registry
