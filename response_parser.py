"""
response_parser.py — turns the vision model's free-form answer into a Diagnosis.

The model is asked to answer like this:

    ANALYSIS: two or three empathetic sentences
    RECOMMENDATIONS:
    PRODUCT: Name - Short description | https://store/products/x | ₹375

but nothing enforces that shape. Labels go missing, markdown creeps in, lines
get merged or cut off. parse() never raises: every step that cannot find what
it is looking for falls back to a defined default instead.

Pipeline:
  1. Normalise  — drop **bold** / __bold__ markers
  2. Analysis   — ordered strategy chain (labelled → unlabelled), tidy,
                  accept only when longer than 10 characters
  3. Products   — split on '|', scan anchor candidates at positions 1, 3, 5 …
                  and emit a Recommendation for every anchor that looks like a URL
  4. Fallbacks  — no pipe at all → the whole response is the analysis;
                  nothing legible → one synthetic catalog-page entry

The parser is a pure function: brand-specific fallback strings are passed in
as a ParserDefaults value, never read from config.
"""
from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from diagnosis import Diagnosis, Recommendation

logger = logging.getLogger(__name__)


# ── Defaults ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParserDefaults:
    """Fallback values used whenever the response is not legible enough."""
    analysis_text: str
    product_name: str
    fallback: Recommendation    # the synthetic catalog-page entry

    @classmethod
    def for_brand(cls, brand: str, store_url: str) -> ParserDefaults:
        return cls(
            analysis_text="We couldn't generate a specific analysis.",
            product_name=f"{brand} Product",
            fallback=Recommendation(
                name=f"{brand} Original Catalog",
                description="View our natural skin and body care range",
                url=f"{store_url.rstrip('/')}/",
                price="",
            ),
        )


DEFAULTS = ParserDefaults.for_brand("Bio Valley", "https://bio-valley.com")


# ── Patterns ──────────────────────────────────────────────────────────────────

_MIN_ANALYSIS_LEN = 10

# Symbol followed by digit groups: ₹375, Rs. 1,299, $12.50, INR 2,00,000
_CURRENCY_AMOUNT = re.compile(
    r"(?:₹|\bRs\.?|\bINR|\$|€|£)\s*\d+(?:,\d+)*(?:\.\d+)?",
    re.IGNORECASE,
)

# "ANALYSIS:" … up to the next section label, a known transition phrase, or the end.
# PRODUCT: is an extra stop beyond RECOMMENDATION(S) so that answers without a
# recommendations heading don't pull product lines into the analysis.
_LABELLED = re.compile(
    r"ANALYSIS:?(.*?)(?:RECOMMENDATIONS?|PRODUCT:|Given the|Here are|$)",
    re.IGNORECASE | re.DOTALL,
)
_ANALYSIS_LABEL  = re.compile(r"ANALYSIS:?", re.IGNORECASE)
_SECTION_BREAK   = re.compile(r"\d+\.|PRODUCT:|##?\s*RECOMMENDATION", re.IGNORECASE)
_HEADING_BREAK   = re.compile(r"##?\s*RECOMMENDATION", re.IGNORECASE)
_LEADING_MARKUP  = re.compile(r"^[\s#:-]+")
# A "2." list marker left dangling on its own line at the very end
_DANGLING_MARKER = re.compile(r"\n[ \t]*\d+\.\Z")
_TRAILING_CHARS  = string.whitespace + "#"

# What opens an entry: a list number or PRODUCT: label at the start or after
# whitespace, or a bullet at the very start of the segment.
# Lookbehind rather than \s+ so whitespace runs are scanned once.
_ENTRY_OPENER = re.compile(
    r"(?:^|(?<=\s))(?:\d+\.\s+|PRODUCT:\s*)|\A\s*[-*•][ \t]+",
    re.IGNORECASE,
)
_LEADING_BULLET = re.compile(r"^[\s\-*:]+")
# Case-sensitive: emitted urls always start with "http"
_URL_SCHEME     = re.compile(r"https?://")


# ── Step 1: normalise ─────────────────────────────────────────────────────────

def normalise(raw: str) -> str:
    """Strip emphasis markers so they can't split or pad field boundaries."""
    return raw.replace("**", "").replace("__", "")


# ── Step 2: analysis text ─────────────────────────────────────────────────────
# Each strategy returns a raw candidate, or None when it does not apply.
# The first strategy that returns a candidate wins, even if the candidate
# later fails the length check.

AnalysisStrategy = Callable[[str], Optional[str]]


def _labelled(text: str) -> Optional[str]:
    match = _LABELLED.search(text)
    if match and match.group(1):
        return match.group(1)
    return None


def _unlabelled(text: str) -> Optional[str]:
    head = _SECTION_BREAK.split(text, maxsplit=1)[0]
    return _ANALYSIS_LABEL.sub("", head, count=1)


ANALYSIS_STRATEGIES: tuple[tuple[str, AnalysisStrategy], ...] = (
    ("labelled",   _labelled),
    ("unlabelled", _unlabelled),
)


def _tidy(candidate: str) -> str:
    text = _LEADING_MARKUP.sub("", candidate).strip()
    # The labelled pattern can under-match and swallow a "## Recommendations" heading
    text = _HEADING_BREAK.split(text, maxsplit=1)[0]
    # Heading hashes and whitespace, then a dangling list marker, then whatever that exposes
    text = text.rstrip(_TRAILING_CHARS)
    text = _DANGLING_MARKER.sub("", text)
    return text.rstrip(_TRAILING_CHARS)


def extract_analysis(text: str, defaults: ParserDefaults = DEFAULTS) -> tuple[str, str]:
    """
    Return (analysis_text, strategy_name) for normalised text.
    Falls back to defaults.analysis_text when the candidate is 10 chars or fewer.
    """
    for name, strategy in ANALYSIS_STRATEGIES:
        candidate = strategy(text)
        if candidate is None:
            continue
        tidy = _tidy(candidate)
        if len(tidy) > _MIN_ANALYSIS_LEN:
            return tidy, name
        return defaults.analysis_text, name
    return defaults.analysis_text, "default"


# ── Step 3: recommendations ───────────────────────────────────────────────────

def looks_like_url(segment: str) -> bool:
    """Anchor predicate: a segment only delimits an entry if it is an http(s) URL."""
    return bool(_URL_SCHEME.match(segment))


def iter_anchored_triples(segments: list[str]) -> Iterator[tuple[str, str, str]]:
    """
    Walk the anchor candidates at positions 1, 3, 5 … of the pipe-split text.

    Yields (lead, anchor, tail) for every candidate that looks like a URL:
    lead is the segment before it (name / description prose), tail the segment
    after it (price prose, possibly followed by the next entry's name).
    Candidates that are not URLs are skipped; the scan never stops early, so a
    stray pipe only costs the triple it lands in.
    """
    if len(segments) < 3:
        return
    cursor = 1
    while cursor < len(segments):
        anchor = segments[cursor].strip()
        if looks_like_url(anchor):
            tail = segments[cursor + 1] if cursor + 1 < len(segments) else ""
            yield segments[cursor - 1], anchor, tail
        cursor += 2


def _split_name(lead: str, defaults: ParserDefaults) -> tuple[str, str]:
    # The previous entry's price sits at the start of this lead
    text = _CURRENCY_AMOUNT.sub("", lead)
    # Keep only what follows the last opener ("1.", "PRODUCT:", "- "), nested numbering included
    text = _ENTRY_OPENER.split(text)[-1]
    text = _LEADING_BULLET.sub("", text).strip()

    name, description = text, ""
    for separator in (":", "-"):
        if separator in text:
            name, _, description = text.partition(separator)
            break

    name = name.replace("#", "").strip()
    description = description.replace("#", "").strip()
    return name or defaults.product_name, description


def _extract_price(tail: str) -> str:
    match = _CURRENCY_AMOUNT.search(tail)
    if match:
        return match.group(0)
    # No currency amount: first word of the segment
    tokens = _LEADING_BULLET.sub("", tail).split()
    return tokens[0] if tokens else ""


def extract_recommendations(
    text: str,
    defaults: ParserDefaults = DEFAULTS,
) -> list[Recommendation]:
    """Every legible pipe-delimited entry in order of appearance (may be empty)."""
    recommendations: list[Recommendation] = []
    for lead, url, tail in iter_anchored_triples(text.split("|")):
        name, description = _split_name(lead, defaults)
        recommendations.append(Recommendation(
            name=name,
            description=description,
            url=url,
            price=_extract_price(tail),
        ))
    return recommendations


# ── Public entry point ────────────────────────────────────────────────────────

def parse(raw: Optional[str], defaults: ParserDefaults = DEFAULTS) -> Diagnosis:
    """
    Interpret a raw model response. Never raises; always returns a Diagnosis
    with a non-empty analysis text and at least one recommendation.
    """
    raw = raw or ""
    clean = normalise(raw)

    if "|" in clean:
        analysis_text, strategy = extract_analysis(clean, defaults)
    else:
        # The model abandoned the structured format; show what it said
        analysis_text, strategy = raw.strip() or defaults.analysis_text, "verbatim"

    recommendations = extract_recommendations(clean, defaults)
    if not recommendations:
        logger.debug("No legible product entries — using catalog fallback")
        recommendations = [defaults.fallback]

    logger.debug(
        "Parsed response: analysis via %s (%d chars), %d recommendation(s)",
        strategy, len(analysis_text), len(recommendations),
    )
    return Diagnosis(analysis_text=analysis_text, recommendations=tuple(recommendations))
