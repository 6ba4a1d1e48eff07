"""
catalog.py — flattens the store's product feed into the catalog block that is
embedded in the model prompt.

Feed: Shopify-style  GET {store}/products.json?limit=…&page=…
  {"products": [{"title": …, "product_type": …, "handle": …,
                 "variants": [{"price": "375.00"}, …]}, …]}

Each product becomes one line:

  - {title} ({category}) | {store}/products/{handle} | {price or "Price unlisted"}

The parser downstream never depends on this content, only on the shape the
model was told to answer in — so when the feed is unreachable or empty,
load_catalog() quietly substitutes a hardcoded static block.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)

FEED_PAGE_SIZE   = 250            # Shopify's maximum page size
DEFAULT_CATEGORY = "Skincare/Haircare"
PRICE_UNLISTED   = "Price unlisted"

# (title, category, handle, price): the store's core range, used when the feed is down
_STATIC_PRODUCTS: list[tuple[str, str, str, str]] = [
    ("Winter Glow Gift Box",         "Deep hydration pack",               "winter-glow-gift-box",         "₹1,299"),
    ("Sugar Strawberry Face Wash",   "Gentle exfoliation",                "sugar-strawberry-facewash",    "₹375"),
    ("Calendula Mimosa Body Lotion", "Soothing for dry skin",             "calendula-mimosa-body-lotion", "₹399"),
    ("Kiwi Refresh Body Lotion",     "Oily/combination skin hydration",   "kiwi-refresh-body-lotion",     "₹249"),
    ("Argan Oil Shampoo",            "Nourishes & strengthens hair",      "argan-oil-shampoo",            "₹891"),
    ("Cedarwood Shampoo",            "Purifies and balances scalp",       "cedarwood-shampoo",            "₹891"),
    ("Dead Sea Shampoo",             "Mineral-rich for flaky scalp",      "dead-sea-shampoo",             "₹843"),
    ("Keratin Shampoo",              "Repairs & smoothens damage",        "keratin-shampoo",              "₹843"),
]


@dataclass
class CatalogLine:
    title: str
    category: str
    url: str
    price: str      # "₹375" or PRICE_UNLISTED

    def render(self) -> str:
        return f"- {self.title} ({self.category}) | {self.url} | {self.price}"


def render_block(lines: list[CatalogLine]) -> str:
    return "\n".join(line.render() for line in lines)


def static_catalog(store_base: str) -> str:
    """The hardcoded fallback block, with URLs built on store_base."""
    base = store_base.rstrip("/")
    return render_block([
        CatalogLine(title, category, f"{base}/products/{handle}", price)
        for title, category, handle, price in _STATIC_PRODUCTS
    ])


# ── Feed parsing ──────────────────────────────────────────────────────────────

def line_from_product(raw: dict, store_base: str, currency: str = "₹") -> Optional[CatalogLine]:
    """Map one feed descriptor to a CatalogLine. Returns None if it is unusable."""
    try:
        if not raw or not isinstance(raw, dict):
            return None
        title  = (raw.get("title") or "").strip()
        handle = (raw.get("handle") or "").strip()
        if not title or not handle:
            return None

        category = (raw.get("product_type") or "").strip() or DEFAULT_CATEGORY

        price = PRICE_UNLISTED
        variants = raw.get("variants") or []
        if variants and isinstance(variants[0], dict) and variants[0].get("price"):
            price = f"{currency}{variants[0]['price']}"

        return CatalogLine(
            title=title,
            category=category,
            url=f"{store_base.rstrip('/')}/products/{handle}",
            price=price,
        )
    except Exception as exc:
        logger.warning("Skipping malformed catalog product %r: %s", raw, exc)
        return None


# ── HTTP ──────────────────────────────────────────────────────────────────────

async def _fetch_page(
    session: aiohttp.ClientSession,
    store_base: str,
    page: int,
    page_size: int,
    timeout: float,
) -> list:
    """Single HTTP call to the feed. Returns the raw product list (may be empty)."""
    async with session.get(
        f"{store_base.rstrip('/')}/products.json",
        params={"limit": str(page_size), "page": str(page)},
        timeout=aiohttp.ClientTimeout(total=timeout),
    ) as resp:
        if resp.status != 200:
            text = await resp.text()
            raise RuntimeError(f"Catalog feed error {resp.status}: {text[:200]}")
        data = await resp.json(content_type=None)
    if not isinstance(data, dict):
        raise RuntimeError("Catalog feed returned a non-object payload")
    return data.get("products") or []


async def fetch_catalog(
    store_base: str,
    limit: int = FEED_PAGE_SIZE,
    currency: str = "₹",
    timeout: float = 15,
) -> str:
    """
    Fetch up to `limit` products from the feed and render the catalog block.
    Raises on transport / HTTP errors; returns "" if no product was usable.
    """
    lines: list[CatalogLine] = []
    page = 1
    async with aiohttp.ClientSession() as session:
        while len(lines) < limit:
            page_size = min(FEED_PAGE_SIZE, limit - len(lines))
            products = await _fetch_page(session, store_base, page, page_size, timeout)
            if not products:
                break
            for raw in products:
                line = line_from_product(raw, store_base, currency)
                if line:
                    lines.append(line)
            if len(products) < page_size:
                break
            page += 1

    logger.info("Catalog feed returned %d usable products (%d page(s))", len(lines), page)
    return render_block(lines[:limit])


async def load_catalog(
    store_base: str,
    limit: int = FEED_PAGE_SIZE,
    currency: str = "₹",
    timeout: float = 15,
) -> str:
    """
    Catalog block for the prompt. Never raises: falls back to the static
    catalog when the feed is unreachable or yields nothing usable.
    """
    try:
        block = await fetch_catalog(store_base, limit=limit, currency=currency, timeout=timeout)
    except Exception as exc:
        logger.warning("Failed to fetch catalog from %s: %s — using static catalog", store_base, exc)
        return static_catalog(store_base)

    if not block:
        logger.warning("Catalog feed at %s had no usable products — using static catalog", store_base)
        return static_catalog(store_base)
    return block
