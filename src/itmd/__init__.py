"""itmd: Itinerary markdown core.

Turns dated travel notes written in markdown into structured event
records: classified type, rich title, destination shape, resolved
timestamps and grouped body metadata (including normalized prices).
"""

from __future__ import annotations

from itmd.extract import EventSummary, iter_events, summarize_events
from itmd.inline import plain_text, slice_inline
from itmd.markdown import ItineraryFrontmatter, load_document, parse_markdown
from itmd.models.blocks import EventNode, Root
from itmd.models.event import Header
from itmd.models.price import MoneyFragment, PriceResult
from itmd.pipeline import (
    ProcessedDocument,
    assemble_events,
    lex_line,
    load_markdown_file,
    normalize_header,
    parse_header,
    process_markdown,
    run_pipeline,
    validate_header,
)
from itmd.price import normalize_price_line
from itmd.services import Policy, Services, make_default_services

__version__ = "0.1.0"

__all__ = [
    "EventNode",
    "EventSummary",
    "Header",
    "ItineraryFrontmatter",
    "MoneyFragment",
    "Policy",
    "PriceResult",
    "ProcessedDocument",
    "Root",
    "Services",
    "assemble_events",
    "iter_events",
    "lex_line",
    "load_document",
    "load_markdown_file",
    "make_default_services",
    "normalize_header",
    "normalize_price_line",
    "parse_header",
    "parse_markdown",
    "plain_text",
    "process_markdown",
    "run_pipeline",
    "slice_inline",
    "summarize_events",
    "validate_header",
]
