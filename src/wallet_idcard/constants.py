"""Shared constants for the wallet identity card service."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List

SERVICE_NAME = "Wallet Identity Card"
SERVICE_VERSION = "1.0.0"

DEFAULT_HIRO_API_URL = "https://api.hiro.so"
DEFAULT_GENERATOR_URL = "https://stx402.com"

SUPPORTED_NETWORKS: List[str] = ["mainnet", "testnet"]

# Two-character network prefix followed by 38-40 uppercase alphanumerics.
ADDRESS_PATTERN = re.compile(r"^S[PM][A-Z0-9]{38,40}$")

MICRO_STX_PER_STX = Decimal(1_000_000)
NATIVE_TOKEN = "STX"

MAX_FUNGIBLE_HOLDINGS = 5
MAX_TOP_COLLECTIONS = 3

DEFAULT_IMAGE_WIDTH = 1024
DEFAULT_IMAGE_HEIGHT = 576

PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_MECHANISM = "stacks-contract-call"

CARD_HEADERS: Dict[str, str] = {
    "Cache-Control": "public, max-age=3600",
    "X-Payment-Verified": "true",
}
NO_NAME_MARKER = "none"


class InvalidAddressError(ValueError):
    """Raised when a string is not a well-formed Stacks address."""


def is_valid_address(address: str) -> bool:
    return bool(ADDRESS_PATTERN.fullmatch(address or ""))


def validate_address(address: str) -> str:
    if not is_valid_address(address):
        raise InvalidAddressError("Invalid Stacks address format")
    return address


def format_micro_amount(raw, places: int = 2) -> str:
    """Convert an integer micro-unit amount to a fixed-point decimal string."""
    amount = Decimal(str(raw)) / MICRO_STX_PER_STX
    return str(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
