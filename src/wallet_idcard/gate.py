"""Pay-per-call gate in front of identity card generation.

A ``/card`` request moves through these states::

    Received -> Validated -> Aggregated -> AwaitingProof            (402 challenge)
                                        -> Verifying -> Rejected    (403)
                                                     -> Fulfilling  (200 image, 402 passthrough, 500)

The wallet record and prompt are always built before branching on the payment
claim, so the challenge carries exactly what a paid call would generate from.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

from .aggregator import aggregate_wallet
from .chain import ChainDataClient
from .config import GateConfig
from .constants import (
    CARD_HEADERS,
    NO_NAME_MARKER,
    PAYMENT_HEADER,
    PAYMENT_MECHANISM,
    InvalidAddressError,
    validate_address,
)
from .generator import ArtifactGenerator, GeneratedArtifact, GeneratorPaymentRequired
from .models import WalletRecord
from .prompt import build_prompt
from .verifier import PaymentVerifier

logger = logging.getLogger("wallet_idcard.gate")

JsonDict = Dict[str, Any]

PROMPT_NOTE = "This prompt will be sent to AI image generation when you call /card/:address"
GENERATOR_PAYMENT_NOTE = "Pay to generate your wallet identity card"


@dataclass
class GateResponse:
    status_code: int
    body: Optional[JsonDict] = None
    content: Optional[bytes] = None
    media_type: str = "application/json"
    headers: Dict[str, str] = field(default_factory=dict)


def _error(status_code: int, message: str, **extra: Any) -> GateResponse:
    return GateResponse(status_code, {"error": message, **extra})


def _header_value(value: str) -> str:
    # Header values go out as latin-1; percent-encode anything outside printable ASCII.
    return value if value.isascii() and value.isprintable() else quote(value, safe="")


class ResourceGate:
    def __init__(
        self,
        config: GateConfig,
        chain_client: ChainDataClient,
        generator: ArtifactGenerator,
        verifier: Optional[PaymentVerifier] = None,
    ) -> None:
        self._config = config
        self._chain = chain_client
        self._generator = generator
        self._verifier = verifier or PaymentVerifier(chain_client, config.payment_contract)

    @property
    def config(self) -> GateConfig:
        return self._config

    async def _build(self, address: str) -> tuple[WalletRecord, str]:
        record = await aggregate_wallet(self._chain, address)
        return record, build_prompt(record)

    async def wallet_data(self, address: str) -> GateResponse:
        try:
            validate_address(address)
        except InvalidAddressError as exc:
            return _error(400, str(exc))
        record = await aggregate_wallet(self._chain, address)
        return GateResponse(200, record.to_json())

    async def prompt_preview(self, address: str) -> GateResponse:
        try:
            validate_address(address)
        except InvalidAddressError as exc:
            return _error(400, str(exc))
        record, prompt = await self._build(address)
        return GateResponse(200, {"walletData": record.to_json(), "prompt": prompt, "note": PROMPT_NOTE})

    def challenge(self, address: str, record: WalletRecord, prompt: str) -> GateResponse:
        cfg = self._config
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=cfg.challenge_ttl_seconds)
        body = {
            "error": "Payment required",
            "code": "PAYMENT_REQUIRED",
            "resource": f"/card/{address}",
            "payment": {
                "contract": cfg.payment_contract,
                "function": cfg.payment_function,
                "price": cfg.price,
                "token": cfg.token,
                "recipient": cfg.recipient,
                "network": cfg.network,
            },
            "mechanism": PAYMENT_MECHANISM,
            "instructions": [
                f"Call {cfg.payment_contract}::{cfg.payment_function} paying {cfg.price_display}",
                "Wait for the transaction to be confirmed",
                f"Retry GET /card/{address} with header {PAYMENT_HEADER}: <txid>",
            ],
            "nonce": secrets.token_hex(16),
            "expiresAt": expires_at.isoformat(timespec="seconds").replace("+00:00", "Z"),
            "description": f"Wallet identity card for {address} ({cfg.price_display})",
            "walletData": record.to_json(),
            "prompt": prompt,
        }
        logger.info("payment challenge issued address=%s", address)
        return GateResponse(402, body)

    async def card(self, address: str, claim: Optional[str] = None) -> GateResponse:
        try:
            validate_address(address)
        except InvalidAddressError as exc:
            return _error(400, str(exc))

        record, prompt = await self._build(address)
        wallet_json = record.to_json()

        if claim is None:
            return self.challenge(address, record, prompt)

        verdict = await self._verifier.verify(claim)
        if not verdict.valid:
            return _error(
                403,
                "Payment verification failed",
                details=verdict.details,
                reason=verdict.reason.value,
            )

        result = await self._generator.generate(prompt)

        if isinstance(result, GeneratorPaymentRequired):
            logger.warning("generator requested payment after gate accepted txid=%s", verdict.txid)
            body = dict(result.payload)
            upstream_error = body.pop("error", None)
            if isinstance(upstream_error, str):
                body["error"] = upstream_error
            else:
                body["error"] = "Payment required by image generator"
                if upstream_error is not None:
                    body["upstreamError"] = upstream_error
            body.update({"note": GENERATOR_PAYMENT_NOTE, "walletData": wallet_json, "prompt": prompt})
            return GateResponse(402, body)

        if not isinstance(result, GeneratedArtifact):
            logger.warning(
                "generation failed after payment txid=%s kind=%s details=%s",
                verdict.txid,
                result.kind,
                result.details,
            )
            return _error(
                500,
                "Failed to generate image",
                details=result.details,
                walletData=wallet_json,
                prompt=prompt,
                payment_received=True,
                payment_txid=verdict.txid,
            )

        headers = {
            **CARD_HEADERS,
            "X-Wallet-Address": address,
            "X-BNS-Name": _header_value(record.name) if record.name else NO_NAME_MARKER,
        }
        if verdict.payer:
            headers["X-Payment-Payer"] = _header_value(verdict.payer)
        logger.info("identity card served address=%s txid=%s", address, verdict.txid)
        return GateResponse(200, content=result.content, media_type=result.media_type, headers=headers)
