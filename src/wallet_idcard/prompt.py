"""Image prompt construction for wallet identity cards."""

from __future__ import annotations

from .constants import NATIVE_TOKEN
from .models import WalletRecord

NO_TOKENS_LABEL = f"{NATIVE_TOKEN} only"
NO_COLLECTIONS_LABEL = "none"
SEPARATOR = ", "

PROMPT_TEMPLATE = """Design a premium digital identity card for a Stacks wallet holder.

Style: dark cyberpunk aesthetic on a near-black background (#0a0a0f), bitcoin orange (#f7931a) and electric blue (#00d4ff) accents, holographic finish.

Layout: horizontal 16:9 card in the format of an exclusive membership card.

Card contents:
- Holder name, large and prominent: "{name}"
- Balance: "{balance} {token}"
- Token badges: {tokens}
- Collectibles: "{nft_count} NFTs"
- Featured collections: {collections}
- Abstract circuit and blockchain motif in the background
- Faint grid lines evoking a digital ledger
- Holographic shimmer strip along one edge
- Small Stacks logo watermark

Typography: clean sans-serif, high-contrast white text on dark.
Mood: collectible, premium, members-only crypto club."""


def display_name(record: WalletRecord) -> str:
    if record.name:
        return record.name
    return f"{record.address[:8]}...{record.address[-4:]}"


def build_prompt(record: WalletRecord) -> str:
    tokens = SEPARATOR.join(h.name for h in record.fungible_holdings) or NO_TOKENS_LABEL
    collections = SEPARATOR.join(c.collection for c in record.top_collections) or NO_COLLECTIONS_LABEL
    return PROMPT_TEMPLATE.format(
        name=display_name(record),
        balance=record.native_balance,
        token=NATIVE_TOKEN,
        tokens=tokens,
        nft_count=record.non_fungible_count,
        collections=collections,
    )
