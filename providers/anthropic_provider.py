"""
Anthropic vision provider — claude-3-haiku (default) and claude-3-5-sonnet.

Pricing (as of early 2025):
  claude-3-haiku-20240307:    $0.25 / 1M input,  $1.25  / 1M output
  claude-3-5-sonnet-20241022: $3.00 / 1M input,  $15.00 / 1M output
  Images cost ~1600 input tokens on either model.
"""
from __future__ import annotations

import base64
import time
import logging

import anthropic

from providers.base import ProviderResult, VisionProvider, detect_media_type

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-haiku-20240307"

_IMAGE_TOKENS = 1600

_PRICING: dict[str, tuple[float, float]] = {
    # model: ($/1k_input, $/1k_output)
    "claude-3-haiku-20240307":    (0.00025, 0.00125),
    "claude-3-5-sonnet-20241022": (0.003,   0.015),
}


class AnthropicProvider(VisionProvider):

    name = "anthropic"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL):
        self.model_id = model
        self._client = anthropic.AsyncAnthropic(api_key=api_key)

        rates = _PRICING.get(model, _PRICING[DEFAULT_MODEL])
        self.cost_per_1k_input_tokens, self.cost_per_1k_output_tokens = rates
        self.cost_per_image = _IMAGE_TOKENS / 1000 * self.cost_per_1k_input_tokens

    async def analyse(self, image_bytes: bytes, prompt: str) -> ProviderResult:
        image_block = {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": detect_media_type(image_bytes),
                "data": base64.b64encode(image_bytes).decode(),
            },
        }
        t0 = time.monotonic()

        message = await self._client.messages.create(
            model=self.model_id,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": [image_block, {"type": "text", "text": prompt}]}],
        )

        latency_ms = int((time.monotonic() - t0) * 1000)
        # Long answers can arrive split over several text blocks
        raw = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        usage = message.usage

        logger.debug("[%s] Raw response: %s", self.full_name, raw[:500])

        return ProviderResult(
            provider_name=self.full_name,
            model_id=self.model_id,
            raw_text=raw,
            latency_ms=latency_ms,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost_usd=self.estimate_cost(usage.input_tokens, usage.output_tokens),
        )
