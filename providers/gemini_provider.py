"""
Google Gemini vision provider — uses the google-genai SDK (v1 API).

Pricing (as of early 2025):
  gemini-2.0-flash:      $0.10  / 1M input,  $0.40  / 1M output
                          Images: $0.00004 per image
  gemini-2.0-flash-lite: $0.075 / 1M input,  $0.30  / 1M output
                          Images: $0.00002 per image
"""
from __future__ import annotations

import time
import logging

from google import genai
from google.genai import types as genai_types

from providers.base import ProviderResult, VisionProvider, detect_media_type

logger = logging.getLogger(__name__)

_PRICING: dict[str, tuple[float, float, float]] = {
    # model_id: ($/1k_input_tokens, $/1k_output_tokens, $/image)
    "gemini-2.0-flash":      (0.0001,   0.0004,  0.00004),
    "gemini-2.0-flash-lite": (0.000075, 0.0003,  0.00002),
}


class GeminiProvider(VisionProvider):

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        self.name     = "google"
        self.model_id = model
        self._client  = genai.Client(api_key=api_key, http_options={"api_version": "v1"})

        rates = _PRICING.get(model, _PRICING["gemini-2.0-flash"])
        self.cost_per_1k_input_tokens  = rates[0]
        self.cost_per_1k_output_tokens = rates[1]
        self.cost_per_image            = rates[2]

    async def analyse(self, image_bytes: bytes, prompt: str) -> ProviderResult:
        gen_config = genai_types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )

        t0 = time.monotonic()

        response = await self._client.aio.models.generate_content(
            model=self.model_id,
            contents=[
                prompt,
                genai_types.Part.from_bytes(data=image_bytes, mime_type=detect_media_type(image_bytes)),
            ],
            config=gen_config,
        )

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = response.text or ""

        usage         = response.usage_metadata
        input_tokens  = getattr(usage, "prompt_token_count",     None) or 1500
        output_tokens = getattr(usage, "candidates_token_count", None) or 300

        logger.debug("[%s] Raw response: %s", self.full_name, raw[:500])

        return ProviderResult(
            provider_name = self.full_name,
            model_id      = self.model_id,
            raw_text      = raw,
            latency_ms    = latency_ms,
            input_tokens  = input_tokens,
            output_tokens = output_tokens,
            cost_usd      = self.estimate_cost(input_tokens, output_tokens),
        )
