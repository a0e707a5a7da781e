"""Offer wizard constants: market, offer and discount codes.

Codes follow the regulated offer record format, where every enumerated
value is a two-digit string.
"""

from __future__ import annotations

from typing import Final, Literal

# =============================================================================
# Market types (offerDetails.TIPO_MERCATO)
# =============================================================================

MARKET_ELECTRICITY: Final[str] = "01"
MARKET_GAS: Final[str] = "02"
MARKET_DUAL_FUEL: Final[str] = "03"

# =============================================================================
# Offer types (offerDetails.TIPO_OFFERTA)
# =============================================================================

OFFER_FIXED: Final[str] = "01"
OFFER_VARIABLE: Final[str] = "02"
OFFER_FLAT: Final[str] = "03"

#: Discount TIPOLOGIA that replaces the energy price index
DISCOUNT_TYPE_REGULATED: Final[str] = "04"

# =============================================================================
# Validation
# =============================================================================

ValidationAction = Literal["INSERIMENTO", "AGGIORNAMENTO"]

#: Action assumed when none is given
DEFAULT_VALIDATION_ACTION: ValidationAction = "INSERIMENTO"

#: Field key used for errors that belong to a whole section
SECTION_ERROR_FIELD: Final[str] = "_section"

#: Section used for errors whose path carries no section
GENERAL_SECTION: Final[str] = "general"

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_DEBOUNCE_MS: Final[int] = 300
DEFAULT_AUTOSAVE_DELAY_SECONDS: Final[float] = 5.0
DEFAULT_DRAFT_PATH: Final[str] = ".offerwizard/draft.json"
PROJECT_CONFIG_FILENAME: Final[str] = "offerwizard.yaml"
