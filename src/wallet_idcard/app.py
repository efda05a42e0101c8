"""FastAPI application exposing the wallet identity card routes.

Run with:

    uvicorn wallet_idcard.app:create_app --factory --port 3456

Configuration is read from the environment or a local ``.env`` file; see
``GateConfig.from_env``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .chain import ChainDataClient
from .config import GateConfig
from .constants import PAYMENT_HEADER, SERVICE_NAME, SERVICE_VERSION
from .gate import GateResponse, ResourceGate
from .generator import ArtifactGenerator

EXAMPLE_ADDRESS = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"

_ADDRESS_ERROR = {400: {"description": "Invalid address format"}}
DATA_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    200: {"description": "Wallet data JSON"},
    **_ADDRESS_ERROR,
}
PROMPT_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    200: {"description": "Wallet data and the prompt a paid call would use"},
    **_ADDRESS_ERROR,
}
CARD_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    200: {
        "description": "PNG image",
        "content": {"image/png": {"schema": {"type": "string", "format": "binary"}}},
    },
    **_ADDRESS_ERROR,
    402: {"description": "Payment required: challenge with payment instructions, wallet data and prompt"},
    403: {"description": "Payment proof rejected"},
    500: {"description": "Payment accepted but image generation failed"},
}


def build_gate(config: GateConfig, http_client: httpx.AsyncClient) -> ResourceGate:
    chain = ChainDataClient(
        config.hiro_api_url, http_client=http_client, timeout=config.lookup_timeout_seconds
    )
    generator = ArtifactGenerator(
        config.generator_base_url,
        http_client=http_client,
        width=config.image_width,
        height=config.image_height,
        timeout=config.generator_timeout_seconds,
    )
    return ResourceGate(config, chain, generator)


def to_response(result: GateResponse) -> Response:
    if result.content is not None:
        return Response(
            content=result.content,
            status_code=result.status_code,
            media_type=result.media_type,
            headers=result.headers,
        )
    return JSONResponse(result.body, status_code=result.status_code, headers=result.headers or None)


def create_app(
    config: GateConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    config = config or GateConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or httpx.AsyncClient()
        app.state.gate = build_gate(config, client)
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(
        title=f"{SERVICE_NAME} API",
        version=SERVICE_VERSION,
        description=(
            "Generate visual identity cards for Stacks wallets. Combines BNS names, "
            "balances and NFT holdings into AI-generated collectible cards."
        ),
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Wallet-Address", "X-BNS-Name", "X-Payment-Verified", "X-Payment-Payer"],
    )

    @app.get("/")
    async def index() -> Dict[str, Any]:
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Generate visual identity cards for Stacks wallets",
            "endpoints": {
                "GET /card/:address": "Generate identity card image (requires payment)",
                "GET /data/:address": "Get raw wallet data as JSON (free)",
                "GET /prompt/:address": "Preview the image generation prompt (free)",
            },
            "pricing": {
                "/card/:address": f"{config.price_display} (covers AI image generation)",
            },
            "payment": {
                "contract": config.payment_contract,
                "function": config.payment_function,
                "network": config.network,
                "header": PAYMENT_HEADER,
            },
            "poweredBy": ["stx402.com", "api.hiro.so"],
        }

    @app.get("/data/{address}", responses=DATA_RESPONSES, summary="Get wallet data")
    async def wallet_data(address: str, request: Request) -> Response:
        return to_response(await request.app.state.gate.wallet_data(address))

    @app.get("/prompt/{address}", responses=PROMPT_RESPONSES, summary="Preview image prompt")
    async def prompt_preview(address: str, request: Request) -> Response:
        return to_response(await request.app.state.gate.prompt_preview(address))

    @app.get("/card/{address}", responses=CARD_RESPONSES, summary="Generate identity card")
    async def card(
        address: str,
        request: Request,
        x_payment: Optional[str] = Header(default=None, alias=PAYMENT_HEADER),
    ) -> Response:
        return to_response(await request.app.state.gate.card(address, x_payment))

    _ = (index, wallet_data, prompt_preview, card)
    return app
