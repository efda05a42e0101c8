"""Read-only Hiro API client for Stacks address state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import httpx
from pydantic import ValidationError

from .constants import DEFAULT_HIRO_API_URL, MAX_FUNGIBLE_HOLDINGS, MAX_TOP_COLLECTIONS, format_micro_amount
from .models import (
    BalancesPayload,
    BnsNamesPayload,
    CollectionPreview,
    FungibleHolding,
    NonFungibleSummary,
    TransactionPayload,
)

logger = logging.getLogger("wallet_idcard.chain")


class Unavailable:
    """Marker for a lookup that failed and must fall back to its default."""

    _instance: Optional["Unavailable"] = None

    def __new__(cls) -> "Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable()


class LookupFailed(Exception):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class TransactionLookup:
    found: bool
    payload: Optional[TransactionPayload] = None
    error: Optional[str] = None

    @property
    def not_found(self) -> bool:
        return not self.found and self.error is None


def _split_asset_key(key: str) -> tuple[str, str]:
    contract, _, asset = key.partition("::")
    return contract, asset


def _parse_count(value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def parse_fungible_holdings(payload: BalancesPayload) -> List[FungibleHolding]:
    holdings = []
    for key, token in list(payload.fungible_tokens.items())[:MAX_FUNGIBLE_HOLDINGS]:
        _, asset = _split_asset_key(key)
        holdings.append(
            FungibleHolding(
                name=asset or "Token",
                symbol=asset[:6] or "TKN",
                balance=format_micro_amount(token.balance),
            )
        )
    return holdings


def parse_non_fungible_holdings(payload: BalancesPayload) -> NonFungibleSummary:
    entries = list(payload.non_fungible_tokens.items())
    top = []
    for key, _ in entries[:MAX_TOP_COLLECTIONS]:
        contract, asset = _split_asset_key(key)
        _, _, contract_name = contract.partition(".")
        top.append(CollectionPreview(collection=contract_name or "Unknown", name=asset or "NFT"))
    return NonFungibleSummary(
        count=sum(_parse_count(nft.count) for _, nft in entries),
        top=top,
    )


class ChainDataClient:
    """Async wrapper around the Hiro API endpoints the card needs.

    Address lookups never raise: any transport error, non-2xx status or
    payload that fails its schema comes back as ``UNAVAILABLE``. Each call is
    attempted once.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_HIRO_API_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_json(self, path: str) -> Any:
        client = self._get_async_client()
        try:
            response = await client.get(f"{self._url}{path}", timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise LookupFailed(f"request to {path} failed: {exc!r}") from exc
        if not response.is_success:
            raise LookupFailed(f"{path} returned {response.status_code}", status=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise LookupFailed(f"{path} returned invalid JSON") from exc

    async def _get_balances(self, address: str) -> BalancesPayload:
        data = await self._get_json(f"/extended/v1/address/{address}/balances")
        return BalancesPayload.model_validate(data)

    async def get_name(self, address: str) -> Union[Optional[str], Unavailable]:
        try:
            data = await self._get_json(f"/v1/addresses/stacks/{address}")
            names = BnsNamesPayload.model_validate(data).names
        except (LookupFailed, ValidationError) as exc:
            logger.warning("name lookup failed address=%s: %s", address, exc)
            return UNAVAILABLE
        return names[0] if names else None

    async def get_native_balance(self, address: str) -> Union[str, Unavailable]:
        try:
            payload = await self._get_balances(address)
            if payload.stx is None:
                return "0.00"
            return format_micro_amount(payload.stx.balance)
        except (LookupFailed, ValidationError, ArithmeticError) as exc:
            logger.warning("balance lookup failed address=%s: %s", address, exc)
            return UNAVAILABLE

    async def get_fungible_holdings(self, address: str) -> Union[List[FungibleHolding], Unavailable]:
        try:
            return parse_fungible_holdings(await self._get_balances(address))
        except (LookupFailed, ValidationError, ArithmeticError) as exc:
            logger.warning("fungible holdings lookup failed address=%s: %s", address, exc)
            return UNAVAILABLE

    async def get_non_fungible_holdings(self, address: str) -> Union[NonFungibleSummary, Unavailable]:
        try:
            return parse_non_fungible_holdings(await self._get_balances(address))
        except (LookupFailed, ValidationError) as exc:
            logger.warning("non-fungible holdings lookup failed address=%s: %s", address, exc)
            return UNAVAILABLE

    async def get_transaction(self, txid: str) -> TransactionLookup:
        try:
            data = await self._get_json(f"/extended/v1/tx/{txid}")
            payload = TransactionPayload.model_validate(data)
        except LookupFailed as exc:
            if exc.status == 404:
                return TransactionLookup(found=False)
            logger.warning("transaction lookup failed txid=%s: %s", txid, exc)
            return TransactionLookup(found=False, error=str(exc))
        except ValidationError as exc:
            logger.warning("transaction payload malformed txid=%s: %s", txid, exc)
            return TransactionLookup(found=False, error="malformed transaction payload")
        return TransactionLookup(found=True, payload=payload)
