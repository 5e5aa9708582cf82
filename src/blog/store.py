"""ContentStore: the directory of post records and the listings over it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from blog.errors import FormatError
from blog.parser import parse, parse_post
from blog.post import Post

logger = logging.getLogger(__name__)

# The static-site generator's default ``markdown_ext`` list
DEFAULT_EXTENSIONS: tuple[str, ...] = ("md", "markdown", "mkdown", "mkdn", "mkd")


class PostListing:
    """Lazy, restartable sequence of the posts in a store.

    Each iteration rescans the directory.  Records that fail to parse are
    skipped and collected in :attr:`errors`, which is reset at the start of
    every pass.
    """

    def __init__(self, store: "ContentStore") -> None:
        self._store = store
        self.errors: list[FormatError] = []

    def __iter__(self) -> Iterator[Post]:
        self.errors = []
        for path in self._store.files():
            try:
                post = parse_post(path)
            except FormatError as exc:
                logger.warning("Skipping malformed post: %s", exc)
                self.errors.append(exc)
                continue
            yield post


class ContentStore:
    """Scans a posts directory and indexes its records by identifier."""

    def __init__(self, posts_dir: Path, extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS) -> None:
        self.posts_dir = Path(posts_dir)
        self.extensions = tuple(ext.lower().lstrip(".") for ext in extensions)
        self.posts: dict[str, Post] = {}
        self.errors: list[FormatError] = []

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def files(self) -> list[Path]:
        """Record files under the posts directory, in sorted order."""
        if not self.posts_dir.is_dir():
            return []
        return [
            path
            for path in sorted(self.posts_dir.rglob("*"))
            if path.is_file()
            and not any(part.startswith(".") for part in path.relative_to(self.posts_dir).parts)
            and path.suffix.lower().lstrip(".") in self.extensions
        ]

    def list_posts(self) -> PostListing:
        return PostListing(self)

    @staticmethod
    def parse(raw_text: str) -> Post:
        return parse(raw_text)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def load(self) -> None:
        """(Re-)scan the store and rebuild the identifier index."""
        self.posts = {}
        listing = self.list_posts()
        duplicates: list[FormatError] = []
        for post in listing:
            key = str(post.identifier)
            if key in self.posts:
                exc = FormatError(
                    f"duplicate identifier {key!r}, already used by {self.posts[key].path}",
                    path=post.path,
                )
                logger.warning("Skipping duplicate post: %s", exc)
                duplicates.append(exc)
                continue
            self.posts[key] = post
        self.errors = listing.errors + duplicates
        logger.debug("Loaded %d posts from %s (%d errors)", len(self.posts), self.posts_dir, len(self.errors))

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> Post | None:
        return self.posts.get(str(identifier))

    def published(self) -> list[Post]:
        """Published posts, newest first."""
        posts = [p for p in self.posts.values() if p.published]
        return sorted(posts, key=lambda p: (p.date, p.slug), reverse=True)

    def search(self, query: str) -> list[Post]:
        """Case-insensitive full-text search across title and body."""
        q = query.lower()
        return [p for p in self.posts.values() if q in p.title.lower() or q in p.body.lower()]

    def with_layout(self, layout: str | None) -> list[Post]:
        return [p for p in self.posts.values() if p.layout == layout]
