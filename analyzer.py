"""
analyzer.py — one skin / scalp analysis, end to end.

  image bytes ─► check_image ─► build_prompt(catalog) ─► manager.invoke ─► response_parser.parse
                                                                              │
                                                                          Diagnosis

ScanSession is the single-slot holder a front-end keeps per user: the catalog
block loaded once at startup, the latest Diagnosis (or error message), and a
reset. Nothing here locks or de-duplicates — if two analyses overlap, the one
that finishes last wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import catalog
import config
from diagnosis import Diagnosis
from providers import manager
from providers.base import ModelInvocationError, ProviderResult, build_prompt
from response_parser import ParserDefaults, parse

logger = logging.getLogger(__name__)


class ImageRejectedError(ValueError):
    """The image can't be sent for analysis. str() is a short user-facing message."""


def check_image(image_bytes: Optional[bytes], max_bytes: Optional[int] = None) -> None:
    max_bytes = config.MAX_IMAGE_BYTES if max_bytes is None else max_bytes
    if not image_bytes:
        raise ImageRejectedError("No image provided. Please upload or capture a photo.")
    if len(image_bytes) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise ImageRejectedError(
            f"File size too large. Please upload an image under {limit_mb:g}MB."
        )


def read_image(path: str | Path) -> bytes:
    """Read an image file from disk, mapping I/O failures to ImageRejectedError."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        logger.warning("Could not read image %s: %s", path, exc)
        raise ImageRejectedError("Could not read the image file. Please try another photo.") from exc


def parser_defaults() -> ParserDefaults:
    return ParserDefaults.for_brand(config.BRAND_NAME, config.STORE_BASE_URL)


async def analyse_photo(
    image_bytes: bytes,
    catalog_text: str,
    mode: Optional[str] = None,
) -> tuple[Diagnosis, ProviderResult]:
    """
    Run one analysis.

    Raises:
        ImageRejectedError:   image missing or over the size limit (model not called)
        ModelInvocationError: the model call failed
    """
    check_image(image_bytes)
    prompt = build_prompt(catalog_text, config.BRAND_NAME)
    result = await manager.invoke(image_bytes, prompt, mode)
    diagnosis = parse(result.raw_text, parser_defaults())
    logger.info(
        "[%s] Diagnosis ready — %d recommendation(s)",
        result.provider_name, len(diagnosis.recommendations),
    )
    return diagnosis, result


# ── Session ────────────────────────────────────────────────────────────────────

@dataclass
class ScanSession:
    catalog_text: Optional[str]          = None
    diagnosis: Optional[Diagnosis]       = None
    error: Optional[str]                 = None
    last_result: Optional[ProviderResult] = None
    mode: Optional[str]                  = None     # None → config.VISION_MODE

    # Catalog fetches are only attempted once per session
    _catalog_attempted: bool = field(default=False, init=False, repr=False)

    async def load_catalog(self) -> str:
        """Load the catalog block once; later calls return the cached text."""
        if not self._catalog_attempted:
            self._catalog_attempted = True
            self.catalog_text = await catalog.load_catalog(
                config.STORE_BASE_URL,
                limit=config.CATALOG_LIMIT,
                currency=config.CATALOG_CURRENCY,
                timeout=config.CATALOG_TIMEOUT,
            )
        return self.catalog_text or catalog.static_catalog(config.STORE_BASE_URL)

    async def analyse(self, image_bytes: bytes) -> Optional[Diagnosis]:
        """
        Analyse a photo and store the outcome in the session.
        Returns the new Diagnosis, or None with session.error set.
        """
        self.error = None
        catalog_text = await self.load_catalog()
        try:
            diagnosis, result = await analyse_photo(image_bytes, catalog_text, self.mode)
        except (ImageRejectedError, ModelInvocationError) as exc:
            logger.warning("Analysis failed: %s", exc)
            self.diagnosis = None
            self.last_result = None
            self.error = str(exc)
            return None

        self.diagnosis = diagnosis
        self.last_result = result
        return diagnosis

    def reset(self) -> None:
        """Forget the current photo's outcome. The catalog stays loaded."""
        self.diagnosis = None
        self.error = None
        self.last_result = None
