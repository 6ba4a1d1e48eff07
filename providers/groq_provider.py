"""
Groq vision provider — Llama vision models via Groq's OpenAI-compatible API.

Groq offers extremely fast inference (LPU hardware) and is the default
provider for skin analysis. Get a free API key at console.groq.com

Supported vision models (as of 2026):
  meta-llama/llama-4-scout-17b-16e-instruct     — default, fast and cheap
  meta-llama/llama-4-maverick-17b-128e-instruct — higher quality, slower

Pricing: Groq charges per token but rates are very low.
  llama-4-scout:    ~$0.11 / 1M input tokens,  $0.34 / 1M output tokens
  llama-4-maverick: ~$0.20 / 1M input tokens,  $0.60 / 1M output tokens
"""
from __future__ import annotations

from providers.openai_provider import OpenAIProvider

DEFAULT_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"


class GroqProvider(OpenAIProvider):

    name = "groq"
    default_model = DEFAULT_MODEL
    base_url = "https://api.groq.com/openai/v1"
    image_detail = None     # not accepted by Groq

    pricing = {
        "meta-llama/llama-4-scout-17b-16e-instruct":     (0.00011, 0.00034, 0.00006),
        "meta-llama/llama-4-maverick-17b-128e-instruct": (0.00020, 0.00060, 0.00010),
    }
