"""
diagnosis.py — canonical home of the Diagnosis and Recommendation records.

response_parser.py builds them, analyzer.py hands them to the caller.
Both are frozen: a new analysis replaces the whole Diagnosis, nothing edits it.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Recommendation:
    """One suggested product taken from the model's pipe-delimited output."""
    name: str             # never empty (placeholder when the model gave none)
    description: str      # may be empty
    url: str              # always starts with http:// or https://
    price: str            # free-form, e.g. "₹375"; may be empty


@dataclass(frozen=True)
class Diagnosis:
    """Parsed result of one analysis request."""
    analysis_text: str
    recommendations: tuple[Recommendation, ...]
