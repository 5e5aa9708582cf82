"""PostDB — queryable database view over the posts in a store.

Each loaded post becomes one row of an in-memory DuckDB ``posts`` table
(see :meth:`blog.post.Post.to_dict` for the columns).  Views come back as
:mod:`polars` DataFrames.

Usage::

    db = PostDB(store)

    # Free-form SQL
    df = db.query("SELECT slug, title FROM posts WHERE 'python' = ANY(languages)")

    # Archive-style views
    table  = db.table_view(published=True, since=date(2014, 1, 1))
    groups = db.group_view(group_by="layout")
    years  = db.yearly_rollup()

    # Which posts carry which front-matter keys
    usage = db.key_usage()
"""

from __future__ import annotations

import datetime as dt
import json
from typing import TYPE_CHECKING, Any

import duckdb
import polars as pl

if TYPE_CHECKING:
    from blog.store import ContentStore

_COLUMNS: tuple[tuple[str, str], ...] = (
    ("identifier", "VARCHAR PRIMARY KEY"),
    ("date", "DATE"),
    ("slug", "VARCHAR"),
    ("title", "VARCHAR"),
    ("layout", "VARCHAR"),
    ("published", "BOOLEAN"),
    ("body", "TEXT"),
    ("links", "VARCHAR[]"),
    ("languages", "VARCHAR[]"),
    ("front_matter", "JSON"),
)


def _json_path(key: str) -> str:
    """SQL string literal for the JSONPath of top-level *key*."""
    quoted = key.replace("\\", "\\\\").replace('"', '\\"')
    return "'" + f'$."{quoted}"'.replace("'", "''") + "'"


class PostDB:
    """In-memory DuckDB database over post metadata and front matter."""

    def __init__(self, store: "ContentStore") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(store)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, store: "ContentStore") -> None:
        """(Re-)populate the database from *store*, loading it first if empty."""
        if not store.posts:
            store.load()
        columns = ", ".join(f"{name} {sql_type}" for name, sql_type in _COLUMNS)
        self.conn.execute(f"CREATE OR REPLACE TABLE posts ({columns})")

        rows = []
        for post in store.posts.values():
            record = post.to_dict()
            record["front_matter"] = json.dumps(record["front_matter"], default=str)
            rows.append(tuple(record[name] for name, _ in _COLUMNS))
        if rows:
            placeholders = ", ".join("?" for _ in _COLUMNS)
            self.conn.executemany(f"INSERT INTO posts VALUES ({placeholders})", rows)

    def query(self, sql: str, params: list[Any] | None = None) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql, params or []).pl()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def table_view(
        self,
        *,
        published: bool | None = None,
        since: dt.date | None = None,
        until: dt.date | None = None,
        search: str | None = None,
        columns: list[str] | None = None,
        order_by: str = "date DESC, slug",
    ) -> pl.DataFrame:
        """Archive listing, newest first.

        ``since`` and ``until`` are inclusive publish-date bounds; ``search``
        is a case-insensitive substring match on title or body.
        """
        cols = ", ".join(columns) if columns else "identifier, date, title, layout, published"
        conditions: list[tuple[str, list[Any]]] = []
        if published is not None:
            conditions.append(("published = ?", [published]))
        if since is not None:
            conditions.append(("date >= ?", [since]))
        if until is not None:
            conditions.append(("date <= ?", [until]))
        if search:
            pattern = f"%{search}%"
            conditions.append(("(title ILIKE ? OR body ILIKE ?)", [pattern, pattern]))

        where = " AND ".join(clause for clause, _ in conditions) or "TRUE"
        params = [value for _, values in conditions for value in values]
        safe_order = order_by.replace(";", "").replace("'", "")
        return self.query(f"SELECT {cols} FROM posts WHERE {where} ORDER BY {safe_order}", params)

    def group_view(self, group_by: str = "layout") -> dict[str, list[dict[str, Any]]]:
        """Group posts by the value of a front-matter key, newest first.

        Posts without the key land under ``"(none)"``.
        """
        df = self.query(
            f"""
            SELECT
                COALESCE(json_extract_string(front_matter, {_json_path(group_by)}), '(none)') AS grp,
                identifier, title, published
            FROM posts
            ORDER BY grp, date DESC, slug
            """
        )
        groups: dict[str, list[dict[str, Any]]] = {}
        for row in df.to_dicts():
            groups.setdefault(row.pop("grp"), []).append(row)
        return groups

    def yearly_rollup(self) -> pl.DataFrame:
        """Published and draft post counts per year, newest year first."""
        return self.query(
            """
            SELECT
                CAST(year(date) AS INTEGER) AS year,
                COUNT(*) FILTER (WHERE published) AS published,
                COUNT(*) FILTER (WHERE NOT published) AS drafts
            FROM posts
            GROUP BY 1
            ORDER BY 1 DESC
            """
        )

    def language_counts(self) -> pl.DataFrame:
        """Number of posts with a fenced code block in each language."""
        return self.query(
            """
            SELECT language, COUNT(*) AS post_count
            FROM (SELECT unnest(languages) AS language FROM posts)
            GROUP BY language
            ORDER BY post_count DESC, language
            """
        )

    def key_usage(self) -> pl.DataFrame:
        """How many posts set each front-matter key, and how many omit it."""
        return self.query(
            """
            WITH used AS (
                SELECT unnest(json_keys(front_matter)) AS key FROM posts
            )
            SELECT
                key,
                COUNT(*) AS post_count,
                (SELECT COUNT(*) FROM posts) - COUNT(*) AS missing
            FROM used
            GROUP BY key
            ORDER BY key
            """
        )

    def front_matter_keys(self) -> list[str]:
        return list(self.key_usage()["key"])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "PostDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
