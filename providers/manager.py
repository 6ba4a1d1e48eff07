"""
Provider Manager — initialises the enabled vision providers and runs the one
analysis call per request. Keys are read from config on every cold start, so
reset_providers() after changing a key is enough — no restart needed.

Modes:
  auto      — first available provider in priority order (Groq → OpenAI → Anthropic → Google)
  cheapest  — the cheapest available provider
  single:X  — only the provider named X (e.g. "single:groq/meta-llama/llama-4-scout-17b-16e-instruct")

Exactly one model call is made per invoke(); there is no parallel fan-out,
no retry and no fallback to a second provider.

Per-model enable/disable via environment variables:
  ENABLE_GROQ_LLAMA4_SCOUT=true/false
  ENABLE_GROQ_LLAMA4_MAVERICK=true/false      (opt-in)
  ENABLE_GPT_4O_MINI=true/false
  ENABLE_GPT_4O=true/false                    (opt-in)
  ENABLE_CLAUDE_3_HAIKU_20240307=true/false
  ENABLE_CLAUDE_3_5_SONNET_20241022=true/false (opt-in)
  ENABLE_GEMINI_2_0_FLASH=true/false
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import config
from providers.base import (
    ModelInvocationError, ProviderResult, VisionProvider, describe_api_error,
)

logger = logging.getLogger(__name__)

# Module-level cache — cleared by reset_providers()
_providers: dict[str, VisionProvider] = {}


def _model_enabled(env_key: str, default: bool = True) -> bool:
    """
    Check whether a specific model is enabled via an environment variable.
    Default is True for most models; pass default=False to require explicit opt-in.
    """
    raw = os.getenv(env_key, "true" if default else "false")
    return raw.strip().lower() not in ("false", "0", "no")


def _build_providers() -> dict[str, VisionProvider]:
    """
    Instantiate every provider whose API key is set AND whose per-model toggle
    is enabled. Returns dict keyed by full_name, in priority order.
    """
    providers: dict[str, VisionProvider] = {}

    # ── Groq (Llama vision — very fast & cheap, default) ─────────────────────
    if config.GROQ_API_KEY:
        from providers.groq_provider import GroqProvider
        for model, env_flag, default_on in [
            ("meta-llama/llama-4-scout-17b-16e-instruct",     "ENABLE_GROQ_LLAMA4_SCOUT",    True),
            ("meta-llama/llama-4-maverick-17b-128e-instruct", "ENABLE_GROQ_LLAMA4_MAVERICK", False),
        ]:
            if _model_enabled(env_flag, default=default_on):
                p = GroqProvider(config.GROQ_API_KEY, model)
                providers[p.full_name] = p
                logger.info("Loaded provider: %s", p.full_name)
            else:
                logger.info("Skipped provider groq/%s (disabled by %s)", model, env_flag)

    # ── OpenAI ────────────────────────────────────────────────────────────────
    if config.OPENAI_API_KEY:
        from providers.openai_provider import OpenAIProvider
        for model, env_flag, default_on in [
            ("gpt-4o-mini", "ENABLE_GPT_4O_MINI", True),
            ("gpt-4o",      "ENABLE_GPT_4O",      False),
        ]:
            if _model_enabled(env_flag, default=default_on):
                p = OpenAIProvider(config.OPENAI_API_KEY, model)
                providers[p.full_name] = p
                logger.info("Loaded provider: %s", p.full_name)
            else:
                logger.info("Skipped provider openai/%s (disabled by %s)", model, env_flag)

    # ── Anthropic ─────────────────────────────────────────────────────────────
    if config.ANTHROPIC_API_KEY:
        from providers.anthropic_provider import AnthropicProvider
        for model, env_flag, default_on in [
            ("claude-3-haiku-20240307",    "ENABLE_CLAUDE_3_HAIKU_20240307",    True),
            # Sonnet requires a paid Anthropic tier; opt-in only (set =true to enable).
            ("claude-3-5-sonnet-20241022", "ENABLE_CLAUDE_3_5_SONNET_20241022", False),
        ]:
            if _model_enabled(env_flag, default=default_on):
                p = AnthropicProvider(config.ANTHROPIC_API_KEY, model)
                providers[p.full_name] = p
                logger.info("Loaded provider: %s", p.full_name)
            else:
                logger.info("Skipped provider anthropic/%s (disabled by %s)", model, env_flag)

    # ── Google ────────────────────────────────────────────────────────────────
    if config.GOOGLE_API_KEY:
        from providers.gemini_provider import GeminiProvider
        if _model_enabled("ENABLE_GEMINI_2_0_FLASH"):
            p = GeminiProvider(config.GOOGLE_API_KEY, "gemini-2.0-flash")
            providers[p.full_name] = p
            logger.info("Loaded provider: %s", p.full_name)
        else:
            logger.info("Skipped provider google/gemini-2.0-flash (disabled by ENABLE_GEMINI_2_0_FLASH)")

    if not providers:
        raise RuntimeError(
            "No vision providers available. "
            "Set at least one of GROQ_API_KEY, OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_API_KEY"
        )

    return providers


def get_providers() -> dict[str, VisionProvider]:
    global _providers
    if not _providers:
        _providers = _build_providers()
    return _providers


def reset_providers() -> None:
    """Drop cached provider instances (call after an API key changes)."""
    global _providers
    _providers = {}


def cheapest_provider() -> VisionProvider:
    providers = get_providers()
    return min(
        providers.values(),
        key=lambda p: p.cost_per_image + p.cost_per_1k_input_tokens * 0.8,
    )


def select_provider(mode: str = "auto") -> VisionProvider:
    """Pick the provider that answers this request. Raises ValueError for unknown names."""
    providers = get_providers()

    if mode == "cheapest":
        return cheapest_provider()
    if mode.startswith("single:"):
        name = mode[len("single:"):]
        if name not in providers:
            available = ", ".join(providers)
            raise ValueError(f"Provider '{name}' not available. Available: {available}")
        return providers[name]
    if mode != "auto":
        logger.warning("Unknown vision mode '%s' — using auto", mode)
    return next(iter(providers.values()))


# ── Core invocation ───────────────────────────────────────────────────────────

async def invoke(
    image_bytes: bytes,
    prompt: str,
    mode: Optional[str] = None,
) -> ProviderResult:
    """
    Run one analysis call and return the raw provider result.
    Every failure — no provider, unknown provider, SDK or transport error —
    is raised as ModelInvocationError.
    """
    try:
        provider = select_provider(mode or config.VISION_MODE)
    except (RuntimeError, ValueError) as exc:
        raise ModelInvocationError(str(exc)) from exc

    try:
        result = await provider.analyse(image_bytes, prompt)
    except Exception as exc:
        detail = describe_api_error(exc)
        logger.error("[%s] Failed: %s", provider.full_name, detail)
        raise ModelInvocationError(detail) from exc

    logger.info(
        "[%s] OK — %d chars cost=%s latency=%dms",
        provider.full_name, len(result.raw_text), result.cost_str, result.latency_ms,
    )
    return result
