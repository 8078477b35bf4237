"""Header pipeline: lex -> parse -> normalize -> validate -> build -> assemble."""

from __future__ import annotations

from itmd.pipeline.assemble import assemble_events
from itmd.pipeline.build import build_event_node, determine_base_type
from itmd.pipeline.lex import LexTokens, Separator, lex_line
from itmd.pipeline.normalize import normalize_header
from itmd.pipeline.parse import TimeSpan, parse_header, parse_time_span, parse_time_token
from itmd.pipeline.run import (
    ProcessedDocument,
    load_markdown_file,
    process_markdown,
    run_pipeline,
)
from itmd.pipeline.validate import validate_header

__all__ = [
    "LexTokens",
    "ProcessedDocument",
    "Separator",
    "TimeSpan",
    "assemble_events",
    "build_event_node",
    "determine_base_type",
    "lex_line",
    "load_markdown_file",
    "normalize_header",
    "parse_header",
    "parse_time_span",
    "parse_time_token",
    "process_markdown",
    "run_pipeline",
    "validate_header",
]
