"""Front-matter, identifier, and body parser for post records."""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Any, Iterator

import yaml

from blog.errors import FormatError
from blog.post import MARKER, CodeBlock, Link, Post, PostId

# 2014-03-09-some-slug.md
_IDENTIFIER_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")
_SLUG_RE = re.compile(r"^[^\s/\\?#%]+$")
# [text](url) or [text](url "title"), but not ![alt](src)
_LINK_RE = re.compile(r"(?<!!)\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
# ``` or ~~~ fence with an optional language hint
_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})\s*([^\s`]*)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")

_BOOL_TAG = "tag:yaml.org,2002:bool"


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that only reads ``true``/``false`` as booleans.

    ``on``/``yes``/``no`` stay strings, and so do numbers whose Python value
    would not print back as written (``3.10``, ``010``, ``1_000``).
    """


_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_FrontMatterLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _construct_int(loader: _FrontMatterLoader, node: yaml.ScalarNode) -> int | str:
    value = loader.construct_yaml_int(node)
    return value if str(value) == node.value else node.value


def _construct_float(loader: _FrontMatterLoader, node: yaml.ScalarNode) -> float | str:
    value = loader.construct_yaml_float(node)
    return value if str(value) == node.value else node.value


_FrontMatterLoader.add_constructor("tag:yaml.org,2002:int", _construct_int)
_FrontMatterLoader.add_constructor("tag:yaml.org,2002:float", _construct_float)


def _is_marker(line: str) -> bool:
    return line.rstrip(" \t\r") == MARKER


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split *text* into ``(front_matter_block, body)``.

    ``front_matter_block`` is ``None`` when the text does not open with a
    marker line.  Raises :class:`FormatError` when the opening marker is
    never closed.
    """
    lines = text.split("\n")
    if not _is_marker(lines[0]):
        return None, text
    for i in range(1, len(lines)):
        if _is_marker(lines[i]):
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :])
    raise FormatError("front matter opened on line 1 is never closed", line=1)


def parse_front_matter(block: str) -> dict[str, Any]:
    """Load a front-matter block into an ordered ``dict``."""
    try:
        data = yaml.load(block, Loader=_FrontMatterLoader)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # +2: the opening marker occupies line 1
        line = mark.line + 2 if mark is not None else None
        problem = getattr(exc, "problem", None) or str(exc)
        raise FormatError(f"invalid front matter: {problem}", line=line) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FormatError(f"front matter must be a key-value mapping, not {type(data).__name__}")
    for key in data:
        if not isinstance(key, str):
            raise FormatError(f"front matter key {key!r} is not a string")
    return data


def parse(raw_text: str, identifier: PostId | None = None, path: Path | None = None) -> Post:
    """Parse record text into a :class:`Post`.  Pure; never touches the disk."""
    block, body = split_front_matter(raw_text)
    front_matter = parse_front_matter(block) if block is not None else {}
    return Post(front_matter=front_matter, body=body, identifier=identifier, path=path)


def dump(post: Post) -> str:
    """Inverse of :func:`parse`."""
    return post.to_text()


def parse_identifier(filename: str) -> PostId:
    """Parse a ``YYYY-MM-DD-slug.ext`` filename into a :class:`PostId`."""
    stem = Path(filename).stem
    match = _IDENTIFIER_RE.match(stem)
    if not match:
        raise FormatError(f"{filename!r} is not named YYYY-MM-DD-slug")
    year, month, day, slug = match.groups()
    try:
        date = dt.date(int(year), int(month), int(day))
    except ValueError as exc:
        raise FormatError(f"{filename!r} has an invalid date: {exc}") from exc
    if not _SLUG_RE.match(slug):
        raise FormatError(f"{filename!r} has a slug that is not URL-safe: {slug!r}")
    return PostId(date, slug)


def parse_post(path: Path) -> Post:
    """Read a record file and return a fully-populated :class:`Post`."""
    path = Path(path)
    try:
        identifier = parse_identifier(path.name)
        try:
            content = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FormatError(f"not valid UTF-8: {exc.reason}") from exc
        return parse(content, identifier=identifier, path=path)
    except FormatError as exc:
        raise exc.with_path(path) from exc.__cause__


# ---------------------------------------------------------------------------
# Body scanning
# ---------------------------------------------------------------------------


def _prose_lines(body: str) -> Iterator[str]:
    """Yield the lines of *body* that sit outside fenced code blocks."""
    fence: str | None = None
    for line in body.splitlines():
        m = _FENCE_RE.match(line)
        if fence is None:
            if m:
                fence = m.group(1)
                continue
            yield line
        elif m and m.group(1).startswith(fence) and not m.group(2):
            fence = None


def parse_links(body: str) -> list[Link]:
    """Return every ``[text](url)`` link outside fenced code, in order."""
    result: list[Link] = []
    for line in _prose_lines(body):
        for m in _LINK_RE.finditer(line):
            result.append(Link(m.group(1), m.group(2)))
    return result


def parse_code_blocks(body: str) -> list[CodeBlock]:
    """Return fenced code blocks with their language hint.

    An unterminated fence runs to the end of the body.
    """
    blocks: list[CodeBlock] = []
    fence: str | None = None
    language = ""
    buf: list[str] = []
    for line in body.splitlines():
        m = _FENCE_RE.match(line)
        if fence is None:
            if m:
                fence, language, buf = m.group(1), m.group(2), []
            continue
        if m and m.group(1).startswith(fence) and not m.group(2):
            blocks.append(CodeBlock(language, "\n".join(buf)))
            fence = None
            continue
        buf.append(line)
    if fence is not None:
        blocks.append(CodeBlock(language, "\n".join(buf)))
    return blocks


def parse_headings(body: str) -> list[tuple[int, str]]:
    """Return ``(level, text)`` for each ``#`` heading outside fenced code."""
    result: list[tuple[int, str]] = []
    for line in _prose_lines(body):
        m = _HEADING_RE.match(line)
        if m:
            result.append((len(m.group(1)), m.group(2)))
    return result
