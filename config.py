"""
Central configuration — reads from .env file.

Every value is optional: the service falls back to the defaults below, and
the vision providers that have no key are simply not loaded.
Code that needs a setting reads config.X at call time, so tests (and a host
application) can override attributes without re-importing.
"""
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# ── AI Vision providers ────────────────────────────────────────────────────────
# Add keys for whichever providers you have access to.
# Only providers whose keys are present are loaded (Groq is tried first).
GROQ_API_KEY: str | None      = os.getenv("GROQ_API_KEY")
OPENAI_API_KEY: str | None    = os.getenv("OPENAI_API_KEY")
ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY")
GOOGLE_API_KEY: str | None    = os.getenv("GOOGLE_API_KEY")

# Vision mode: which provider answers an analysis request.
#   auto      → first available provider in priority order (default)
#   cheapest  → always use the cheapest available provider
#   single:groq/meta-llama/llama-4-scout-17b-16e-instruct  → force a specific provider
VISION_MODE: str = os.getenv("VISION_MODE", "auto")

# ── Store / catalog ───────────────────────────────────────────────────────────
BRAND_NAME: str       = os.getenv("BRAND_NAME", "Bio Valley")
STORE_BASE_URL: str   = os.getenv("STORE_BASE_URL", "https://bio-valley.com").rstrip("/")
CATALOG_LIMIT: int    = int(os.getenv("CATALOG_LIMIT", "250"))
CATALOG_CURRENCY: str = os.getenv("CATALOG_CURRENCY", "₹")
CATALOG_TIMEOUT: float = float(os.getenv("CATALOG_TIMEOUT", "15"))

# ── Image acquisition ─────────────────────────────────────────────────────────
MAX_IMAGE_BYTES: int = int(os.getenv("MAX_IMAGE_BYTES", str(4 * 1024 * 1024)))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install the service-wide log format on stdout.
    Meant to be called once by the host application at startup.
    """
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
