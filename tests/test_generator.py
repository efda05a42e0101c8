import base64
import json

import httpx
import pytest

from wallet_idcard.generator import (
    FETCH_FAILED,
    REJECTED,
    ArtifactGenerator,
    GeneratedArtifact,
    GenerationFailure,
    GeneratorPaymentRequired,
)

from conftest import GENERATE_PATH, PNG_BYTES

IMAGE_PATH = "/images/card.png"


def make_generator(upstream):
    return ArtifactGenerator("https://stx402.com", http_client=upstream.client())


@pytest.mark.asyncio
async def test_generate_returns_image_bytes(upstream):
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GeneratedArtifact)
    assert result.content == PNG_BYTES
    assert result.media_type == "image/png"

    body = json.loads(upstream.requests[0].content)
    assert body == {"prompt": "a card", "width": 1024, "height": 576}


@pytest.mark.asyncio
async def test_generate_follows_url_pointer(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(200, json={"imageUrl": f"https://cdn.test{IMAGE_PATH}"}))
    upstream.set(IMAGE_PATH, httpx.Response(200, content=b"jpeg", headers={"content-type": "image/jpeg"}))
    result = await make_generator(upstream).generate("a card")
    assert result == GeneratedArtifact(b"jpeg", "image/jpeg")


@pytest.mark.asyncio
async def test_pointer_fetch_failure(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(200, json={"url": f"https://cdn.test{IMAGE_PATH}"}))
    upstream.set(IMAGE_PATH, httpx.Response(410))
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GenerationFailure)
    assert result.kind == FETCH_FAILED
    assert result.status == 410
    assert upstream.paths().count(GENERATE_PATH) == 1


@pytest.mark.asyncio
async def test_generate_decodes_inline_base64(upstream):
    encoded = base64.b64encode(PNG_BYTES).decode()
    upstream.set(GENERATE_PATH, httpx.Response(200, json={"image": f"data:image/webp;base64,{encoded}"}))
    result = await make_generator(upstream).generate("a card")
    assert result == GeneratedArtifact(PNG_BYTES, "image/webp")


@pytest.mark.asyncio
async def test_generator_payment_required_passthrough(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(402, json={"error": "pay me", "price": "0.001"}))
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GeneratorPaymentRequired)
    assert result.payload == {"error": "pay me", "price": "0.001"}


@pytest.mark.asyncio
async def test_generator_rejection(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(500, text="upstream down"))
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GenerationFailure)
    assert result.kind == REJECTED
    assert result.status == 500


@pytest.mark.asyncio
async def test_generator_unreachable(upstream):
    def explode(request):
        raise httpx.ConnectError("refused", request=request)

    upstream.set(GENERATE_PATH, explode)
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GenerationFailure)
    assert result.kind == REJECTED


@pytest.mark.asyncio
async def test_json_without_artifact_is_rejected(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(200, json={"status": "queued"}))
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GenerationFailure)
    assert result.kind == REJECTED


@pytest.mark.asyncio
async def test_unfetchable_pointer_is_fetch_failure(upstream):
    upstream.set(GENERATE_PATH, httpx.Response(200, json={"url": "https://cdn.test/card\n.png"}))
    result = await make_generator(upstream).generate("a card")
    assert isinstance(result, GenerationFailure)
    assert result.kind == FETCH_FAILED
    assert upstream.paths().count(GENERATE_PATH) == 1
