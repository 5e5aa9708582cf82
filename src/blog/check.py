"""Validate every post record of a site.

Usage::

    python -m blog.check [--root DIR] [--posts-dir DIR] [--log-level LEVEL]

Prints one line per failing record and exits with status 1 when any record
failed, otherwise prints a summary and exits 0.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

from blog.config import load_config
from blog.errors import FormatError
from blog.log import setup_logging
from blog.store import ContentStore


@dataclass
class CheckReport:
    checked: int = 0
    errors: list[FormatError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def check_store(store: ContentStore) -> CheckReport:
    """Load *store* and report every record that failed."""
    store.load()
    return CheckReport(checked=len(store.posts) + len(store.errors), errors=list(store.errors))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="blog.check", description=__doc__.splitlines()[0])
    parser.add_argument("--root", type=Path, default=Path("."), help="site root holding _config.yml")
    parser.add_argument("--posts-dir", help="posts directory, overriding the site config")
    parser.add_argument("--log-level", help="logging level name")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.root)
    except FormatError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    setup_logging(args.log_level or config.log_level)

    posts_path = config.posts_path
    if args.posts_dir:
        posts_path = Path(args.posts_dir)
    store = ContentStore(posts_path, config.markdown_ext)
    report = check_store(store)

    for exc in report.errors:
        print(exc)
    if not report.ok:
        print(f"{len(report.errors)} of {report.checked} records failed", file=sys.stderr)
        return 1
    print(f"{report.checked} records ok")
    return 0


if __name__ == "__main__":
    sys.exit(main())
