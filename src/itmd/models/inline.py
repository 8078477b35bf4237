"""Inline content models (the "rich span" building blocks).

Inline nodes mirror the phrasing content of a markdown paragraph:
plain text, code spans, links, emphasis and friends.  They are frozen
pydantic models so that an inline forest can be sliced and shared
without defensive copies -- :func:`itmd.inline.slice_inline` always
returns new nodes.

A *rich span* is simply ``list[InlineNode]``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


class Text(BaseModel):
    """A run of plain text.  Soft line breaks appear as ``"\\n"``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    value: str


class InlineCode(BaseModel):
    """A backtick code span.  ``value`` excludes the backticks."""

    model_config = ConfigDict(frozen=True)

    type: Literal["inlineCode"] = "inlineCode"
    value: str


class Break(BaseModel):
    """A hard line break.  Flattens to a single ``"\\n"``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["break"] = "break"


class Image(BaseModel):
    """An inline image.  Flattens to its ``alt`` text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    url: str
    alt: str = ""
    title: str | None = None


class InlineHtml(BaseModel):
    """Raw inline HTML, kept verbatim."""

    model_config = ConfigDict(frozen=True)

    type: Literal["html"] = "html"
    value: str


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


class Link(BaseModel):
    """A hyperlink whose visible label is its ``children``.

    Attributes:
        url: Link destination exactly as written.
        title: Optional link title.
        children: Label content.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["link"] = "link"
    url: str
    title: str | None = None
    children: list[InlineNode] = Field(default_factory=list)


class Emphasis(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["emphasis"] = "emphasis"
    children: list[InlineNode] = Field(default_factory=list)


class Strong(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["strong"] = "strong"
    children: list[InlineNode] = Field(default_factory=list)


class Delete(BaseModel):
    """Strikethrough (``~~text~~``)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["delete"] = "delete"
    children: list[InlineNode] = Field(default_factory=list)


InlineNode = Annotated[
    Union[Text, InlineCode, Break, Image, InlineHtml, Link, Emphasis, Strong, Delete],
    Field(discriminator="type"),
]

# Ordered inline content.  Titles, destinations and metadata values are
# always carried as rich spans, never as plain strings.
RichSpan = list[InlineNode]

Link.model_rebuild()
Emphasis.model_rebuild()
Strong.model_rebuild()
Delete.model_rebuild()
