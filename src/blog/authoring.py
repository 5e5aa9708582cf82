"""Create new post records."""

from __future__ import annotations

import datetime as dt
import logging
import re
from pathlib import Path
from typing import Any

from blog.parser import parse_post
from blog.post import Post, PostId

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Turn a post title into the URL-safe slug used in its filename."""
    s = title.lower()
    s = re.sub(r"[^a-z0-9\s-]", "", s)
    s = re.sub(r"[\s-]+", "-", s).strip("-")
    if not s:
        raise ValueError(f"title {title!r} has no characters usable in a slug")
    return s


def new_post(
    posts_dir: Path,
    title: str,
    *,
    on: dt.date | None = None,
    layout: str | None = "post",
    published: bool = True,
    extension: str = "md",
    extra: dict[str, Any] | None = None,
) -> Post:
    """Write a fresh ``YYYY-MM-DD-slug.<extension>`` record and return it.

    Raises :class:`FileExistsError` rather than overwrite an existing record.
    """
    posts_dir = Path(posts_dir)
    identifier = PostId(on or dt.date.today(), slugify(title))

    front_matter: dict[str, Any] = {}
    if layout is not None:
        front_matter["layout"] = layout
    front_matter["title"] = title
    front_matter["published"] = published
    front_matter.update(extra or {})

    post = Post(front_matter=front_matter, body="\n", identifier=identifier)
    path = posts_dir / f"{identifier}.{extension.lstrip('.')}"
    posts_dir.mkdir(parents=True, exist_ok=True)
    # "x" so an existing record is never clobbered
    with open(path, "x", encoding="utf-8") as fh:
        fh.write(post.to_text())
    logger.info("Created %s", path)
    return parse_post(path)
