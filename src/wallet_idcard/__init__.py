"""Pay-per-call wallet identity cards for Stacks addresses."""

from __future__ import annotations

from .aggregator import aggregate_wallet, merge_wallet_record
from .app import create_app
from .chain import UNAVAILABLE, ChainDataClient, TransactionLookup, Unavailable
from .config import ConfigError, GateConfig
from .constants import (
    ADDRESS_PATTERN,
    PAYMENT_HEADER,
    SERVICE_VERSION,
    InvalidAddressError,
    is_valid_address,
    validate_address,
)
from .gate import GateResponse, ResourceGate
from .generator import (
    ArtifactGenerator,
    GeneratedArtifact,
    GenerationFailure,
    GeneratorPaymentRequired,
)
from .models import (
    CollectionPreview,
    FungibleHolding,
    NonFungibleSummary,
    PaymentVerdict,
    VerdictReason,
    WalletRecord,
)
from .prompt import build_prompt, display_name
from .verifier import MalformedClaimError, PaymentVerifier, normalize_txid

__version__ = SERVICE_VERSION

__all__ = [
    "ADDRESS_PATTERN",
    "PAYMENT_HEADER",
    "InvalidAddressError",
    "is_valid_address",
    "validate_address",
    "ConfigError",
    "GateConfig",
    "UNAVAILABLE",
    "Unavailable",
    "ChainDataClient",
    "TransactionLookup",
    "aggregate_wallet",
    "merge_wallet_record",
    "build_prompt",
    "display_name",
    "MalformedClaimError",
    "PaymentVerifier",
    "normalize_txid",
    "ArtifactGenerator",
    "GeneratedArtifact",
    "GenerationFailure",
    "GeneratorPaymentRequired",
    "GateResponse",
    "ResourceGate",
    "CollectionPreview",
    "FungibleHolding",
    "NonFungibleSummary",
    "PaymentVerdict",
    "VerdictReason",
    "WalletRecord",
    "create_app",
]