import asyncio

import httpx
import pytest

from wallet_idcard.aggregator import aggregate_wallet, merge_wallet_record
from wallet_idcard.chain import UNAVAILABLE, ChainDataClient
from wallet_idcard.models import FungibleHolding, NonFungibleSummary

from conftest import ADDRESS, BALANCES_PATH, NAMES_PATH, balances_payload


def make_client(upstream):
    return ChainDataClient("https://api.hiro.so", http_client=upstream.client())


@pytest.mark.asyncio
async def test_aggregate_full_record(upstream):
    record = await aggregate_wallet(make_client(upstream), ADDRESS)
    assert record.to_json() == {
        "address": ADDRESS,
        "bnsName": "satoshi.btc",
        "stxBalance": "12.35",
        "ftBalances": [
            {"symbol": "token0", "name": "token0name", "balance": "1.00"},
            {"symbol": "token1", "name": "token1name", "balance": "2.00"},
        ],
        "nftCount": 3,
        "topNfts": [
            {"collection": "collection-0", "name": "item-0"},
            {"collection": "collection-1", "name": "item-1"},
        ],
    }


@pytest.mark.asyncio
async def test_total_outage_yields_degraded_record(upstream):
    upstream.set(NAMES_PATH, httpx.Response(500))
    upstream.set(BALANCES_PATH, httpx.Response(503))
    record = await aggregate_wallet(make_client(upstream), ADDRESS)
    assert record.address == ADDRESS
    assert record.name is None
    assert record.native_balance == "0"
    assert record.fungible_holdings == []
    assert record.non_fungible_count == 0
    assert record.top_collections == []


@pytest.mark.asyncio
async def test_fields_degrade_independently(upstream):
    upstream.set(NAMES_PATH, httpx.Response(500))
    record = await aggregate_wallet(make_client(upstream), ADDRESS)
    assert record.name is None
    assert record.native_balance == "12.35"
    assert record.non_fungible_count == 3


@pytest.mark.asyncio
async def test_truncation_and_full_count(upstream):
    upstream.set(
        BALANCES_PATH,
        httpx.Response(200, json=balances_payload(fungible_count=8, collection_count=7)),
    )
    record = await aggregate_wallet(make_client(upstream), ADDRESS)
    assert len(record.fungible_holdings) == 5
    assert len(record.top_collections) == 3
    assert record.non_fungible_count == 1 + 2 + 3 + 4 + 5 + 6 + 7


@pytest.mark.asyncio
async def test_lookups_run_concurrently(upstream):
    in_flight = 0
    peak = 0

    async def slow(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.05)
        in_flight -= 1
        if request.url.path == NAMES_PATH:
            return httpx.Response(200, json={"names": []})
        return httpx.Response(200, json=balances_payload())

    upstream.set(NAMES_PATH, slow)
    upstream.set(BALANCES_PATH, slow)
    await aggregate_wallet(make_client(upstream), ADDRESS)
    assert peak == 4


def test_merge_is_pure_reduction():
    holdings = [FungibleHolding(symbol="ALEX", name="alex", balance="1.00")]
    record = merge_wallet_record(
        ADDRESS, UNAVAILABLE, "3.00", holdings, NonFungibleSummary(count=9)
    )
    assert record.name is None
    assert record.native_balance == "3.00"
    assert record.fungible_holdings == holdings
    assert record.non_fungible_count == 9
    assert record.top_collections == []
