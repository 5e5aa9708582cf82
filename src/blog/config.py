"""Site configuration.

Read from the generator's ``_config.yml`` at the site root when present.
Environment variables (take precedence over the file):

    BLOG_POSTS_DIR     – posts directory, relative to the source dir
    BLOG_MARKDOWN_EXT  – comma-separated record extensions
    BLOG_LOG_LEVEL     – logging level name (default: ``WARNING``)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from blog.errors import FormatError
from blog.store import DEFAULT_EXTENSIONS

CONFIG_FILENAME = "_config.yml"


@dataclass
class BlogConfig:
    root: Path
    source: str = "."
    posts_dir: str = "_posts"
    markdown_ext: tuple[str, ...] = DEFAULT_EXTENSIONS
    log_level: str = "WARNING"

    @property
    def posts_path(self) -> Path:
        return self.root / self.source / self.posts_dir


def _split_ext(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = str(value).split(",")
    return tuple(v.strip().lstrip(".") for v in items if v.strip())


def load_config(root: Path | str = ".") -> BlogConfig:
    """Build a :class:`BlogConfig` for the site rooted at *root*."""
    root = Path(root)
    config = BlogConfig(root=root)

    config_path = root / CONFIG_FILENAME
    if config_path.is_file():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise FormatError(f"invalid site config: {exc}", path=config_path) from exc
        if not isinstance(data, dict):
            raise FormatError("site config must be a key-value mapping", path=config_path)
        config.source = str(data.get("source", config.source))
        config.posts_dir = str(data.get("posts_dir", config.posts_dir))
        if "markdown_ext" in data:
            config.markdown_ext = _split_ext(data["markdown_ext"])

    config.posts_dir = os.getenv("BLOG_POSTS_DIR", config.posts_dir)
    if os.getenv("BLOG_MARKDOWN_EXT"):
        config.markdown_ext = _split_ext(os.environ["BLOG_MARKDOWN_EXT"])
    config.log_level = os.getenv("BLOG_LOG_LEVEL", config.log_level)
    return config
