"""Request-scoped data models and upstream payload schemas."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Canonical wallet record
# ---------------------------------------------------------------------------


class FungibleHolding(BaseModel):
    symbol: str
    name: str
    balance: str


class CollectionPreview(BaseModel):
    collection: str
    name: str


class NonFungibleSummary(BaseModel):
    count: int = 0
    top: List[CollectionPreview] = Field(default_factory=list)


class WalletRecord(BaseModel):
    """Aggregated view of an address at request time.

    Every field except ``address`` has a failure default, so a record can
    always be produced even when every upstream lookup failed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    address: str
    name: Optional[str] = Field(default=None, alias="bnsName")
    native_balance: str = Field(default="0", alias="stxBalance")
    fungible_holdings: List[FungibleHolding] = Field(default_factory=list, alias="ftBalances")
    non_fungible_count: int = Field(default=0, alias="nftCount")
    top_collections: List[CollectionPreview] = Field(default_factory=list, alias="topNfts")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Upstream (Hiro API) payload schemas
# ---------------------------------------------------------------------------


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class BnsNamesPayload(_Upstream):
    names: List[str] = Field(default_factory=list)


class StxBalance(_Upstream):
    balance: str = "0"


class FungibleBalance(_Upstream):
    balance: str = "0"


class NonFungibleBalance(_Upstream):
    count: Any = "0"


class BalancesPayload(_Upstream):
    stx: Optional[StxBalance] = None
    fungible_tokens: Dict[str, FungibleBalance] = Field(default_factory=dict)
    non_fungible_tokens: Dict[str, NonFungibleBalance] = Field(default_factory=dict)


class ContractCall(_Upstream):
    contract_id: Optional[str] = None
    function_name: Optional[str] = None


class TransactionPayload(_Upstream):
    tx_id: Optional[str] = None
    tx_status: Optional[str] = None
    tx_type: Optional[str] = None
    sender_address: Optional[str] = None
    contract_call: Optional[ContractCall] = None


# ---------------------------------------------------------------------------
# Payment verdicts
# ---------------------------------------------------------------------------


class VerdictReason(str, Enum):
    MALFORMED_CLAIM = "malformed-claim"
    NOT_FOUND = "not-found"
    WRONG_STATUS = "wrong-status"
    WRONG_OPERATION_KIND = "wrong-operation-kind"
    WRONG_TARGET_CONTRACT = "wrong-target-contract"
    LOOKUP_ERROR = "lookup-error"


@dataclass(frozen=True)
class PaymentVerdict:
    valid: bool
    txid: Optional[str] = None
    payer: Optional[str] = None
    reason: Optional[VerdictReason] = None
    details: Optional[str] = None

    @classmethod
    def accepted(cls, txid: str, payer: Optional[str]) -> "PaymentVerdict":
        return cls(valid=True, txid=txid, payer=payer)

    @classmethod
    def rejected(
        cls, reason: VerdictReason, details: str, txid: Optional[str] = None
    ) -> "PaymentVerdict":
        return cls(valid=False, txid=txid, reason=reason, details=details)
