import httpx
import pytest

from wallet_idcard.config import GateConfig

ADDRESS = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
CONTRACT = "SP3FBR2AGK5H9QBDH3EEN6DF8EK8JY7RX8QJ5SVTE.idcard-payments"
TXID = "0x" + "ab" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-card"

NAMES_PATH = f"/v1/addresses/stacks/{ADDRESS}"
BALANCES_PATH = f"/extended/v1/address/{ADDRESS}/balances"
TX_PATH = f"/extended/v1/tx/{TXID}"
GENERATE_PATH = "/api/ai/generate-image"


def balances_payload(fungible_count=2, collection_count=2, stx="12345678"):
    return {
        "stx": {"balance": stx, "total_sent": "0", "total_received": stx},
        "fungible_tokens": {
            f"SP1TOKENDEPLOYER.token-{i}::token{i}name": {"balance": str((i + 1) * 1_000_000)}
            for i in range(fungible_count)
        },
        "non_fungible_tokens": {
            f"SP1NFTDEPLOYER.collection-{i}::item-{i}": {"count": str(i + 1)}
            for i in range(collection_count)
        },
    }


def transaction_payload(status="success", tx_type="contract_call", contract_id=CONTRACT):
    payload = {
        "tx_id": TXID,
        "tx_status": status,
        "tx_type": tx_type,
        "sender_address": "SP1PAYERADDRESS",
    }
    if tx_type == "contract_call":
        payload["contract_call"] = {"contract_id": contract_id, "function_name": "pay"}
    return payload


class FakeUpstream:
    """Routes requests by URL path; unknown paths answer 404."""

    def __init__(self) -> None:
        self.routes = {}
        self.requests = []

    def set(self, path, response):
        self.routes[path] = response
        return self

    def paths(self):
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    fake.set(NAMES_PATH, httpx.Response(200, json={"names": ["satoshi.btc"]}))
    fake.set(BALANCES_PATH, httpx.Response(200, json=balances_payload()))
    fake.set(TX_PATH, httpx.Response(200, json=transaction_payload()))
    fake.set(
        GENERATE_PATH,
        httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"}),
    )
    return fake


@pytest.fixture
def config():
    return GateConfig(payment_contract=CONTRACT)
