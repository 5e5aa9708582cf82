"""Unit tests for blog.db.PostDB."""

import datetime as dt
import textwrap
from pathlib import Path

import duckdb
import polars as pl
import pytest

from blog.db import PostDB
from blog.store import ContentStore

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _write(directory: Path, name: str, content: str) -> None:
    (directory / f"{name}.md").write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture()
def db(tmp_path: Path) -> PostDB:
    _write(tmp_path, "2012-04-01-alpha", """\
        ---
        layout: post
        title: Alpha
        published: true
        ---
        See [beta](/beta) and [docs](https://example.com).

        ```python
        print("alpha")
        ```
    """)
    _write(tmp_path, "2013-05-02-beta", """\
        ---
        layout: post
        title: Beta
        published: false
        ---
        ```bash
        echo beta
        ```

        ```python
        print("beta")
        ```
    """)
    _write(tmp_path, "2013-09-03-gamma", """\
        # Gamma

        No front matter at all.
    """)
    store = ContentStore(tmp_path)
    store.load()
    return PostDB(store)


# ---------------------------------------------------------------------------
# query()
# ---------------------------------------------------------------------------


class TestPostDBQuery:
    def test_basic_select(self, db: PostDB):
        df = db.query("SELECT slug FROM posts ORDER BY slug")
        assert list(df["slug"]) == ["alpha", "beta", "gamma"]

    def test_filter_by_language(self, db: PostDB):
        df = db.query("SELECT slug FROM posts WHERE 'python' = ANY(languages) ORDER BY slug")
        assert list(df["slug"]) == ["alpha", "beta"]

    def test_links_column(self, db: PostDB):
        df = db.query("SELECT links FROM posts WHERE slug = 'alpha'")
        assert list(df["links"][0]) == ["/beta", "https://example.com"]

    def test_returns_polars_dataframe(self, db: PostDB):
        assert isinstance(db.query("SELECT slug FROM posts"), pl.DataFrame)

    def test_query_params(self, db: PostDB):
        df = db.query("SELECT slug FROM posts WHERE layout = ? ORDER BY slug", ["post"])
        assert list(df["slug"]) == ["alpha", "beta"]

    def test_front_matter_stored_as_json(self, db: PostDB):
        df = db.query("SELECT front_matter->>'title' AS t FROM posts WHERE slug = 'beta'")
        assert df["t"][0] == "Beta"

    def test_invalid_sql_raises(self, db: PostDB):
        with pytest.raises(duckdb.Error):
            db.query("SELECT * FROM nonexistent_table")


# ---------------------------------------------------------------------------
# table_view()
# ---------------------------------------------------------------------------


class TestTableView:
    def test_newest_first(self, db: PostDB):
        df = db.table_view()
        assert list(df["title"]) == ["gamma", "Beta", "Alpha"]

    def test_published_only(self, db: PostDB):
        df = db.table_view(published=True)
        assert list(df["title"]) == ["gamma", "Alpha"]

    def test_unpublished_only(self, db: PostDB):
        df = db.table_view(published=False)
        assert list(df["title"]) == ["Beta"]

    def test_search(self, db: PostDB):
        df = db.table_view(search="FRONT MATTER")
        assert list(df["title"]) == ["gamma"]

    def test_search_with_quote(self, db: PostDB):
        df = db.table_view(search="it's")
        assert df.is_empty()

    def test_columns(self, db: PostDB):
        df = db.table_view(columns=["slug"], order_by="slug")
        assert df.columns == ["slug"]
        assert list(df["slug"]) == ["alpha", "beta", "gamma"]

    def test_since(self, db: PostDB):
        df = db.table_view(since=dt.date(2013, 5, 2))
        assert list(df["title"]) == ["gamma", "Beta"]

    def test_until(self, db: PostDB):
        df = db.table_view(until=dt.date(2013, 5, 1))
        assert list(df["title"]) == ["Alpha"]

    def test_date_range_and_published(self, db: PostDB):
        df = db.table_view(published=True, since=dt.date(2013, 1, 1), until=dt.date(2013, 12, 31))
        assert list(df["title"]) == ["gamma"]


# ---------------------------------------------------------------------------
# group_view()
# ---------------------------------------------------------------------------


class TestGroupView:
    def test_group_by_layout(self, db: PostDB):
        groups = db.group_view()
        assert set(groups) == {"post", "(none)"}
        assert [row["title"] for row in groups["post"]] == ["Beta", "Alpha"]
        assert [row["title"] for row in groups["(none)"]] == ["gamma"]

    def test_group_by_missing_key(self, db: PostDB):
        groups = db.group_view("category")
        assert list(groups) == ["(none)"]
        assert len(groups["(none)"]) == 3

    def test_group_by_boolean_key(self, db: PostDB):
        groups = db.group_view("published")
        assert [row["title"] for row in groups["true"]] == ["Alpha"]
        assert [row["title"] for row in groups["false"]] == ["Beta"]

    @pytest.mark.parametrize("key", ["series.name", "reading time", "sub-title", "it's"])
    def test_group_by_key_with_punctuation(self, tmp_path: Path, key: str):
        _write(tmp_path, "2020-02-02-one", f"---\n\"{key}\": shared\n---\nOne.\n")
        _write(tmp_path, "2020-03-03-two", f"---\n\"{key}\": shared\n---\nTwo.\n")
        _write(tmp_path, "2020-04-04-three", "Three.\n")
        with PostDB(ContentStore(tmp_path)) as db:
            groups = db.group_view(key)
        assert [row["identifier"] for row in groups["shared"]] == ["2020-03-03-two", "2020-02-02-one"]
        assert [row["identifier"] for row in groups["(none)"]] == ["2020-04-04-three"]


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------


class TestRollups:
    def test_front_matter_keys(self, db: PostDB):
        assert db.front_matter_keys() == ["layout", "published", "title"]

    def test_key_usage_counts_missing_posts(self, db: PostDB):
        rows = db.key_usage().to_dicts()
        assert rows == [
            {"key": "layout", "post_count": 2, "missing": 1},
            {"key": "published", "post_count": 2, "missing": 1},
            {"key": "title", "post_count": 2, "missing": 1},
        ]

    def test_language_counts(self, db: PostDB):
        rows = db.language_counts().to_dicts()
        assert rows == [
            {"language": "python", "post_count": 2},
            {"language": "bash", "post_count": 1},
        ]

    def test_yearly_rollup(self, db: PostDB):
        rows = db.yearly_rollup().to_dicts()
        assert rows == [
            {"year": 2013, "published": 1, "drafts": 1},
            {"year": 2012, "published": 1, "drafts": 0},
        ]

    def test_empty_store(self, tmp_path: Path):
        with PostDB(ContentStore(tmp_path)) as db:
            assert db.yearly_rollup().is_empty()
            assert db.front_matter_keys() == []


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_context_manager_closes(self, tmp_path: Path):
        store = ContentStore(tmp_path)
        with PostDB(store) as db:
            assert db.query("SELECT COUNT(*) AS n FROM posts")["n"][0] == 0
        with pytest.raises(duckdb.Error):
            db.query("SELECT 1")

    def test_refresh_loads_unloaded_store(self, tmp_path: Path):
        _write(tmp_path, "2019-01-01-solo", "Solo.\n")
        db = PostDB(ContentStore(tmp_path))
        assert list(db.query("SELECT slug FROM posts")["slug"]) == ["solo"]

    def test_refresh_after_new_post(self, tmp_path: Path):
        store = ContentStore(tmp_path)
        db = PostDB(store)
        _write(tmp_path, "2019-01-01-late", "Late.\n")
        store.load()
        db.refresh(store)
        assert list(db.query("SELECT slug FROM posts")["slug"]) == ["late"]
