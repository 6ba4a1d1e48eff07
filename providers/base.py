"""
Shared types and base class for all vision providers.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ── Prompt (shared across all providers) ──────────────────────────────────────

PROMPT_TEMPLATE = """You are an expert dermatologist and hair care specialist for an Indian cosmetics brand named {brand}. Analyze this image of a person's skin or scalp.

Provide your response in TWO clear sections:

1. ANALYSIS: A brief, empathetic, 2-3 sentence analysis of what you observe (e.g., dryness, oiliness, dandruff, dullness).
2. RECOMMENDATIONS: Based on your analysis, recommend EXACTLY 3 products from this {brand} catalog that form a complete routine.

CRITICAL: You MUST format your recommendations exactly like this, with a pipe symbol '|' separating the fields:
PRODUCT: [Name] - [Short Description] | [URL] | [Price]

Catalog:
{catalog}"""

REMEDIATION_HINT = "If this persists, the API key may be invalid or quota exceeded."


def build_prompt(catalog_text: str, brand: str) -> str:
    """Assemble the instruction sent alongside the image."""
    return PROMPT_TEMPLATE.format(brand=brand, catalog=catalog_text.strip())


def detect_media_type(image_bytes: bytes) -> str:
    """Sniff the image format from its magic number (default jpeg)."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


# ── Errors ────────────────────────────────────────────────────────────────────

class ModelInvocationError(RuntimeError):
    """
    The model call failed. `detail` is the upstream message, kept verbatim;
    str() appends the fixed remediation hint shown to the operator.
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{detail.rstrip('. ')}. {REMEDIATION_HINT}")


def describe_api_error(exc: BaseException) -> str:
    """
    Human-readable upstream message for any SDK / transport exception.
    SDK status errors (openai, anthropic, google-genai) become
    "API Error: {status} - {message}".
    """
    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    if isinstance(status, int):
        return f"API Error: {status} - {message}"
    return message


# ── Shared result type ─────────────────────────────────────────────────────────

@dataclass
class ProviderResult:
    """Raw answer from a single vision provider call."""
    provider_name: str          # e.g. "groq/meta-llama/llama-4-scout-17b-16e-instruct"
    model_id: str               # full model id
    raw_text: str               # unparsed response text, handed to response_parser
    latency_ms: int             # wall-clock time for this call
    input_tokens: int
    output_tokens: int
    cost_usd: float             # estimated cost

    @property
    def cost_str(self) -> str:
        if self.cost_usd < 0.001:
            return f"${self.cost_usd * 1000:.3f}m"   # show in milli-dollars
        return f"${self.cost_usd:.4f}"


# ── Abstract base ──────────────────────────────────────────────────────────────

class VisionProvider(ABC):
    """Base class all vision providers must implement."""

    name: str           # e.g. "groq"
    model_id: str       # e.g. "meta-llama/llama-4-scout-17b-16e-instruct"
    cost_per_1k_input_tokens: float
    cost_per_1k_output_tokens: float
    # Extra per-image cost for vision (input image processing flat fee or per-tile)
    cost_per_image: float = 0.0

    # Room for the analysis plus three pipe-delimited product lines
    max_tokens: int = 1024
    temperature: float = 0.1

    @abstractmethod
    async def analyse(self, image_bytes: bytes, prompt: str) -> ProviderResult:
        """Send image_bytes + prompt in one request. Must return ProviderResult."""
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            self.cost_per_image
            + input_tokens / 1000 * self.cost_per_1k_input_tokens
            + output_tokens / 1000 * self.cost_per_1k_output_tokens
        )
