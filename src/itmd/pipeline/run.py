"""End-to-end entry points: markdown text in, transformed tree out.

Stages::

    load_document -> assemble_events -> convert_alerts

Frontmatter ``timezone``/``currency`` values override the policy defaults
for the document being processed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from itmd.alerts import convert_alerts
from itmd.extract import iter_events
from itmd.markdown import ItineraryFrontmatter, load_document
from itmd.models.blocks import EventNode, Root
from itmd.pipeline.assemble import assemble_events
from itmd.services import Policy, Services, make_default_services

logger = logging.getLogger(__name__)


@dataclass
class ProcessedDocument:
    """Result of :func:`process_markdown`.

    Attributes:
        root: The transformed document tree.
        frontmatter: Normalized frontmatter, or ``None``.
        events: Event nodes of ``root`` in document order.
    """

    root: Root
    frontmatter: ItineraryFrontmatter | None = None
    events: list[EventNode] = field(default_factory=list)


def run_pipeline(root: Root, services: Services | None = None) -> Root:
    """Assemble events, then convert admonitions, in place."""
    services = services or make_default_services()
    assemble_events(root, services)
    convert_alerts(root)
    return root


def _document_policy(policy: Policy, fm: ItineraryFrontmatter | None) -> Policy:
    if fm is None:
        return policy
    updates: dict[str, str] = {}
    if fm.timezone:
        updates["default_timezone"] = fm.timezone
    if fm.currency:
        updates["default_currency"] = fm.currency.upper()
    return replace(policy, **updates) if updates else policy


def process_markdown(text: str, policy: Policy | None = None) -> ProcessedDocument:
    """Parse and transform a whole markdown document.

    Args:
        text: Markdown source, optionally with YAML frontmatter.
        policy: Base policy; frontmatter values take precedence.

    Returns:
        The transformed tree, its frontmatter and its events.
    """
    document = load_document(text)
    effective = _document_policy(policy or Policy(), document.frontmatter)
    root = run_pipeline(document.root, make_default_services(effective))
    events = list(iter_events(root))
    logger.info("Processed document: %d event(s)", len(events))
    return ProcessedDocument(root=root, frontmatter=document.frontmatter, events=events)


def load_markdown_file(path: str | Path) -> str:
    """Read a markdown file as UTF-8 text.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Markdown file not found: {file_path}")
    return file_path.read_text(encoding="utf-8")
