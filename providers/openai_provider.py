"""
OpenAI vision provider — gpt-4o-mini and gpt-4o via the chat completions API.

Also the base for any OpenAI-compatible endpoint (see groq_provider.py):
subclasses only change base_url, the pricing table and the image detail.

Pricing (as of early 2025):
  gpt-4o:       $5.00 / 1M input tokens,  $15.00 / 1M output tokens
  gpt-4o-mini:  $0.15 / 1M input tokens,  $0.60 / 1M output tokens
  A high-detail close-up photo costs ~765 input tokens on either model.
"""
from __future__ import annotations

import base64
import time
import logging
from typing import Optional

from openai import AsyncOpenAI

from providers.base import ProviderResult, VisionProvider, detect_media_type

logger = logging.getLogger(__name__)


class OpenAIProvider(VisionProvider):

    name = "openai"
    default_model = "gpt-4o-mini"
    base_url: Optional[str] = None
    image_detail: Optional[str] = "high"

    # model: ($/1k_input, $/1k_output, $/image)
    pricing: dict[str, tuple[float, float, float]] = {
        "gpt-4o":      (0.005,   0.015,  0.003825),
        "gpt-4o-mini": (0.00015, 0.0006, 0.00011475),
    }

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.model_id = model or self.default_model
        self._client = AsyncOpenAI(api_key=api_key, base_url=self.base_url)

        rates = self.pricing.get(self.model_id, self.pricing[self.default_model])
        self.cost_per_1k_input_tokens, self.cost_per_1k_output_tokens, self.cost_per_image = rates

    def _image_part(self, image_bytes: bytes) -> dict:
        b64 = base64.b64encode(image_bytes).decode()
        image_url = {"url": f"data:{detect_media_type(image_bytes)};base64,{b64}"}
        if self.image_detail:
            image_url["detail"] = self.image_detail
        return {"type": "image_url", "image_url": image_url}

    async def analyse(self, image_bytes: bytes, prompt: str) -> ProviderResult:
        t0 = time.monotonic()

        response = await self._client.chat.completions.create(
            model=self.model_id,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    self._image_part(image_bytes),
                ],
            }],
        )

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = response.choices[0].message.content or ""
        # Some compatible endpoints omit usage; fall back to a typical photo + answer
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 1500
        output_tokens = usage.completion_tokens if usage else 300

        logger.debug("[%s] Raw response: %s", self.full_name, raw[:500])

        return ProviderResult(
            provider_name=self.full_name,
            model_id=self.model_id,
            raw_text=raw,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )
