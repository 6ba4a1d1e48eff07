"""
Shared pytest fixtures.

Every test runs with all vision API keys cleared and the provider cache
emptied, so nothing reaches a real API and keys in a developer's .env
never leak into test results.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Blank out API keys and pin the store settings for every test."""
    import config
    for key in ("GROQ_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.setattr(config, key, None)
    monkeypatch.setattr(config, "VISION_MODE", "auto")
    monkeypatch.setattr(config, "BRAND_NAME", "Bio Valley")
    monkeypatch.setattr(config, "STORE_BASE_URL", "https://bio-valley.com")
    monkeypatch.setattr(config, "MAX_IMAGE_BYTES", 4 * 1024 * 1024)

    import providers.manager as manager_mod
    manager_mod.reset_providers()
    yield config
    manager_mod.reset_providers()


@pytest.fixture
def well_formed_response() -> str:
    """A response that follows the requested format exactly."""
    return (
        "ANALYSIS: Your skin shows mild dryness around the cheeks with slight flaking. "
        "A gentle, hydrating routine should help restore its barrier.\n\n"
        "RECOMMENDATIONS:\n"
        "PRODUCT: Sugar Strawberry Face Wash - Gentle exfoliation | "
        "https://bio-valley.com/products/sugar-strawberry-facewash | ₹375\n"
        "PRODUCT: Calendula Mimosa Body Lotion - Soothing for dry skin | "
        "https://bio-valley.com/products/calendula-mimosa-body-lotion | ₹399\n"
        "PRODUCT: Winter Glow Gift Box - Deep hydration pack | "
        "https://bio-valley.com/products/winter-glow-gift-box | ₹1,299"
    )
