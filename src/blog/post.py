"""Core Post dataclass and its filename-derived identifier."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

import yaml

MARKER = "---"


class PostId(NamedTuple):
    """Publish date plus slug, as encoded in ``YYYY-MM-DD-slug`` filenames."""

    date: dt.date
    slug: str

    def __str__(self) -> str:
        return f"{self.date.isoformat()}-{self.slug}"


class Link(NamedTuple):
    text: str
    url: str


class CodeBlock(NamedTuple):
    #: Language hint after the opening fence; empty when the fence has none
    language: str
    code: str


@dataclass
class Post:
    """A single blog post: front matter plus verbatim body."""

    front_matter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    identifier: PostId | None = None
    path: Path | None = field(default=None, compare=False)

    # ------------------------------------------------------------------
    # Front-matter accessors
    # ------------------------------------------------------------------

    @property
    def slug(self) -> str | None:
        return self.identifier.slug if self.identifier else None

    @property
    def date(self) -> dt.date | None:
        return self.identifier.date if self.identifier else None

    @property
    def title(self) -> str:
        """``title`` from the front matter, else the slug spelled out."""
        title = self.front_matter.get("title")
        if title:
            return str(title)
        return self.slug.replace("-", " ") if self.slug else ""

    @property
    def layout(self) -> str | None:
        layout = self.front_matter.get("layout")
        return str(layout) if layout is not None else None

    @property
    def published(self) -> bool:
        return self.front_matter.get("published", True) is not False

    # ------------------------------------------------------------------
    # Body scanning
    # ------------------------------------------------------------------

    @property
    def links(self) -> list[Link]:
        from blog.parser import parse_links

        return parse_links(self.body)

    @property
    def code_blocks(self) -> list[CodeBlock]:
        from blog.parser import parse_code_blocks

        return parse_code_blocks(self.body)

    @property
    def headings(self) -> list[tuple[int, str]]:
        from blog.parser import parse_headings

        return parse_headings(self.body)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_text(self) -> str:
        """Render the post back to record text that :func:`parse` accepts."""
        if not self.front_matter:
            first_line = self.body.split("\n", 1)[0]
            if first_line.rstrip(" \t\r") == MARKER:
                return f"{MARKER}\n{MARKER}\n{self.body}"
            return self.body
        block = yaml.safe_dump(
            self.front_matter,
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
            width=1000,
        )
        return f"{MARKER}\n{block}{MARKER}\n{self.body}"

    def to_dict(self) -> dict[str, Any]:
        """Flat record of the post, as stored by :class:`blog.db.PostDB`."""
        return {
            "identifier": str(self.identifier) if self.identifier else None,
            "date": self.date,
            "slug": self.slug,
            "title": self.title,
            "layout": self.layout,
            "published": self.published,
            "body": self.body,
            "links": [link.url for link in self.links],
            "languages": sorted({block.language for block in self.code_blocks if block.language}),
            "front_matter": self.front_matter,
        }
