"""Runtime configuration for the wallet identity card gate."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_GENERATOR_URL,
    DEFAULT_HIRO_API_URL,
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    NATIVE_TOKEN,
    SUPPORTED_NETWORKS,
    format_micro_amount,
)

DEFAULT_PAYMENT_FUNCTION = "pay"
DEFAULT_PRICE = "1000"  # micro-STX
DEFAULT_NETWORK = "mainnet"
DEFAULT_CHALLENGE_TTL_SECONDS = 300
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 10.0
DEFAULT_GENERATOR_TIMEOUT_SECONDS = 60.0


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class GateConfig:
    payment_contract: str
    payment_function: str = DEFAULT_PAYMENT_FUNCTION
    price: str = DEFAULT_PRICE
    token: str = NATIVE_TOKEN
    recipient: Optional[str] = None
    network: str = DEFAULT_NETWORK
    hiro_api_url: str = DEFAULT_HIRO_API_URL
    generator_base_url: str = DEFAULT_GENERATOR_URL
    challenge_ttl_seconds: int = DEFAULT_CHALLENGE_TTL_SECONDS
    lookup_timeout_seconds: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS
    generator_timeout_seconds: float = DEFAULT_GENERATOR_TIMEOUT_SECONDS
    image_width: int = DEFAULT_IMAGE_WIDTH
    image_height: int = DEFAULT_IMAGE_HEIGHT

    def __post_init__(self) -> None:
        deployer, _, name = self.payment_contract.partition(".")
        if not deployer or not name:
            raise ConfigError(
                f"payment_contract must look like <principal>.<contract-name>, got {self.payment_contract!r}"
            )
        if not self.price.isdigit():
            raise ConfigError(f"price must be an integer amount of micro-units, got {self.price!r}")
        if self.network not in SUPPORTED_NETWORKS:
            raise ConfigError(f"Unsupported network {self.network!r}")
        if self.recipient is None:
            object.__setattr__(self, "recipient", deployer)

    @property
    def price_display(self) -> str:
        return f"{format_micro_amount(self.price, places=6).rstrip('0').rstrip('.')} {self.token}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GateConfig":
        """Build a config from environment variables (and a local ``.env``)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            value = environ.get(key)
            if value is None or not value.strip():
                return default
            return value.strip()

        def number(key: str, default, kind):
            raw = get(key)
            if raw is None:
                return default
            try:
                return kind(raw)
            except ValueError as exc:
                raise ConfigError(f"{key} must be a number, got {raw!r}") from exc

        contract = get("PAYMENT_CONTRACT")
        if not contract:
            raise ConfigError("Missing configuration for PAYMENT_CONTRACT")

        return cls(
            payment_contract=contract,
            payment_function=get("PAYMENT_FUNCTION", DEFAULT_PAYMENT_FUNCTION),
            price=get("PAYMENT_PRICE", DEFAULT_PRICE),
            token=get("PAYMENT_TOKEN", NATIVE_TOKEN),
            recipient=get("PAYMENT_RECIPIENT"),
            network=get("STACKS_NETWORK", DEFAULT_NETWORK),
            hiro_api_url=get("HIRO_API_URL", DEFAULT_HIRO_API_URL),
            generator_base_url=get("STX402_BASE", DEFAULT_GENERATOR_URL),
            challenge_ttl_seconds=number("CHALLENGE_TTL_SECONDS", DEFAULT_CHALLENGE_TTL_SECONDS, int),
            lookup_timeout_seconds=number("LOOKUP_TIMEOUT_SECONDS", DEFAULT_LOOKUP_TIMEOUT_SECONDS, float),
            generator_timeout_seconds=number(
                "GENERATOR_TIMEOUT_SECONDS", DEFAULT_GENERATOR_TIMEOUT_SECONDS, float
            ),
            image_width=number("IMAGE_WIDTH", DEFAULT_IMAGE_WIDTH, int),
            image_height=number("IMAGE_HEIGHT", DEFAULT_IMAGE_HEIGHT, int),
        )
