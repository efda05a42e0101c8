"""Concurrent fan-out over the chain lookups and fan-in into a WalletRecord."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Union

from .chain import UNAVAILABLE, ChainDataClient, Unavailable
from .models import FungibleHolding, NonFungibleSummary, WalletRecord

logger = logging.getLogger("wallet_idcard.aggregator")


def merge_wallet_record(
    address: str,
    name: Union[Optional[str], Unavailable],
    native_balance: Union[str, Unavailable],
    fungible: Union[List[FungibleHolding], Unavailable],
    non_fungible: Union[NonFungibleSummary, Unavailable],
) -> WalletRecord:
    """Reduce four lookup results into a record, defaulting unavailable fields."""
    degraded = [
        field
        for field, value in (
            ("name", name),
            ("balance", native_balance),
            ("fungible", fungible),
            ("non_fungible", non_fungible),
        )
        if value is UNAVAILABLE
    ]
    if degraded:
        logger.warning("degraded wallet record address=%s fields=%s", address, ",".join(degraded))

    nfts = NonFungibleSummary() if non_fungible is UNAVAILABLE else non_fungible
    return WalletRecord(
        address=address,
        name=None if name is UNAVAILABLE else name,
        native_balance="0" if native_balance is UNAVAILABLE else native_balance,
        fungible_holdings=[] if fungible is UNAVAILABLE else fungible,
        non_fungible_count=nfts.count,
        top_collections=nfts.top,
    )


async def aggregate_wallet(client: ChainDataClient, address: str) -> WalletRecord:
    name, balance, fungible, non_fungible = await asyncio.gather(
        client.get_name(address),
        client.get_native_balance(address),
        client.get_fungible_holdings(address),
        client.get_non_fungible_holdings(address),
    )
    return merge_wallet_record(address, name, balance, fungible, non_fungible)
