"""Tests for the post reader — frontmatter, defaults, and wiki-links."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from postgraph.content.reader import (
    PostReader,
    extract_wiki_links,
    normalize_slug,
    parse_frontmatter,
    read_posts,
    split_frontmatter,
)
from postgraph.errors import PipelineReport, SourceReadError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _write_post(posts_dir: Path, name: str, text: str) -> Path:
    posts_dir.mkdir(parents=True, exist_ok=True)
    path = posts_dir / name
    path.write_text(text, encoding="utf-8")
    return path


class TestNormalizeSlug:
    def test_lowercases_and_hyphenates(self):
        assert normalize_slug("  My Great   Post ") == "my-great-post"

    def test_keeps_existing_hyphens(self):
        assert normalize_slug("already-a-slug") == "already-a-slug"


class TestExtractWikiLinks:
    def test_plain_and_labelled_links(self):
        body = "See [[Other Post]] and [[b-slug|the B post]]."
        assert extract_wiki_links(body) == ["other-post", "b-slug"]

    def test_dedups_after_normalization_in_first_occurrence_order(self):
        body = "[[Beta]] then [[alpha]] then [[beta]] then [[ALPHA|again]]"
        assert extract_wiki_links(body) == ["beta", "alpha"]

    def test_no_links(self):
        assert extract_wiki_links("plain [markdown](link) only") == []


class TestFrontmatter:
    def test_split_returns_block_and_body(self):
        raw, body = split_frontmatter("---\ntitle: Hi\n---\nBody text\n")
        assert raw == "title: Hi"
        assert body == "Body text\n"

    def test_split_empty_block(self):
        raw, body = split_frontmatter("---\n---\nHello [[b]]\n")
        assert raw == ""
        assert body == "Hello [[b]]\n"

    def test_empty_block_closes_at_first_delimiter(self):
        raw, body = split_frontmatter("---\n---\nintro\n---\nmore")
        assert raw == ""
        assert body == "intro\n---\nmore"

    def test_split_after_bom(self):
        raw, body = split_frontmatter("\ufeff---\ntitle: Hi\n---\nBody")
        assert raw == "title: Hi"
        assert body == "Body"

    def test_split_without_frontmatter(self):
        raw, body = split_frontmatter("Just a body")
        assert raw is None
        assert body == "Just a body"

    def test_parse_inline_and_block_lists(self):
        assert parse_frontmatter("tags: [a, b]")["tags"] == ["a", "b"]
        assert parse_frontmatter("tags:\n  - a\n  - b")["tags"] == ["a", "b"]

    def test_parse_empty_block(self):
        assert parse_frontmatter("") == {}
        assert parse_frontmatter(None) == {}

    def test_invalid_yaml_raises(self):
        with pytest.raises(SourceReadError):
            parse_frontmatter("title: [unclosed")

    def test_non_mapping_raises(self):
        with pytest.raises(SourceReadError):
            parse_frontmatter("- a\n- b")


class TestReadFile:
    def test_reads_all_fields(self, tmp_path: Path):
        path = _write_post(
            tmp_path,
            "first-post.mdx",
            "---\n"
            "title: First Post\n"
            "date: 2024-01-15\n"
            "excerpt: A short summary\n"
            "tags: [python, graphs]\n"
            "draft: false\n"
            "---\n"
            "Links to [[Second Post]].\n",
        )
        doc = PostReader(now=NOW).read_file(path)

        assert doc.slug == "first-post"
        assert doc.title == "First Post"
        assert doc.date == datetime(2024, 1, 15, tzinfo=UTC)
        assert doc.excerpt == "A short summary"
        assert doc.tags == ["python", "graphs"]
        assert doc.primary_tag == "python"
        assert doc.draft is False
        assert doc.explicit_links == ["second-post"]
        assert doc.body == "Links to [[Second Post]].\n"

    def test_defaults_without_frontmatter(self, tmp_path: Path):
        path = _write_post(tmp_path, "bare.mdx", "No metadata here.")
        doc = PostReader(now=NOW).read_file(path)

        assert doc.title == "bare"
        assert doc.tags == []
        assert doc.date == NOW
        assert doc.excerpt is None
        assert doc.primary_tag == "uncategorized"

    def test_empty_tag_list(self, tmp_path: Path):
        path = _write_post(tmp_path, "empty.mdx", "---\ntitle: Empty\ntags: []\n---\nx")
        doc = PostReader(now=NOW).read_file(path)
        assert doc.tags == []

    def test_empty_frontmatter_block_is_not_body(self, tmp_path: Path):
        path = _write_post(tmp_path, "empty-fm.mdx", "---\n---\nHello [[b]]\n")
        doc = PostReader(now=NOW).read_file(path)

        assert doc.body == "Hello [[b]]\n"
        assert doc.title == "empty-fm"
        assert doc.explicit_links == ["b"]

    def test_bom_before_frontmatter(self, tmp_path: Path):
        path = tmp_path / "bom.mdx"
        path.write_bytes("\ufeff---\ntitle: With BOM\n---\nx".encode("utf-8"))
        assert PostReader(now=NOW).read_file(path).title == "With BOM"

    def test_scalar_tag_becomes_list(self, tmp_path: Path):
        path = _write_post(tmp_path, "one.mdx", "---\ntags: solo\n---\nx")
        assert PostReader(now=NOW).read_file(path).tags == ["solo"]

    def test_datetime_string_keeps_timezone(self, tmp_path: Path):
        path = _write_post(tmp_path, "ts.mdx", '---\ndate: "2024-02-01T10:30:00+09:00"\n---\nx')
        doc = PostReader(now=NOW).read_file(path)
        assert doc.date.isoformat() == "2024-02-01T10:30:00+09:00"

    def test_unparsable_date_falls_back_to_now(self, tmp_path: Path):
        path = _write_post(tmp_path, "bad-date.mdx", "---\ndate: someday\n---\nx")
        assert PostReader(now=NOW).read_file(path).date == NOW

    def test_malformed_frontmatter_uses_defaults(self, tmp_path: Path):
        path = _write_post(
            tmp_path, "broken.mdx", "---\ntitle: [unclosed\n---\nBody with [[target]]"
        )
        report = PipelineReport()
        doc = PostReader(now=NOW).read_file(path, report=report)

        assert doc.title == "broken"
        assert doc.tags == []
        assert doc.explicit_links == ["target"]
        assert report.errors[0].error_type == "frontmatter_error"

    def test_slug_field_overrides_filename(self, tmp_path: Path):
        path = _write_post(tmp_path, "2024-01-01-file.mdx", "---\nslug: Custom Slug\n---\nx")
        assert PostReader(now=NOW).read_file(path).slug == "custom-slug"

    def test_unreadable_file_raises(self, tmp_path: Path):
        path = tmp_path / "binary.mdx"
        path.write_bytes(b"\xff\xfe\xfa not utf-8")
        with pytest.raises(SourceReadError):
            PostReader(now=NOW).read_file(path)


class TestReadAll:
    def test_missing_directory_is_empty(self, tmp_path: Path):
        assert read_posts(tmp_path / "does-not-exist") == []

    def test_sorted_non_recursive_extension_filtered(self, tmp_path: Path):
        _write_post(tmp_path, "b.mdx", "b")
        _write_post(tmp_path, "a.mdx", "a")
        _write_post(tmp_path, "notes.md", "ignored")
        _write_post(tmp_path / "nested", "c.mdx", "ignored too")

        docs = read_posts(tmp_path)
        assert [d.slug for d in docs] == ["a", "b"]

    def test_custom_extensions(self, tmp_path: Path):
        _write_post(tmp_path, "a.mdx", "a")
        _write_post(tmp_path, "b.md", "b")
        docs = read_posts(tmp_path, extensions=[".md", ".mdx"])
        assert [d.slug for d in docs] == ["a", "b"]

    def test_unreadable_file_is_skipped_and_reported(self, tmp_path: Path):
        _write_post(tmp_path, "good.mdx", "fine")
        (tmp_path / "bad.mdx").write_bytes(b"\xff\xfe\xfa")
        report = PipelineReport()

        docs = read_posts(tmp_path, report=report)

        assert [d.slug for d in docs] == ["good"]
        assert report.error_count == 1
        assert report.errors[0].source == "bad.mdx"

    def test_skip_drafts(self, tmp_path: Path):
        _write_post(tmp_path, "live.mdx", "---\ndraft: false\n---\nx")
        _write_post(tmp_path, "wip.mdx", "---\ndraft: true\n---\nx")

        assert [d.slug for d in read_posts(tmp_path)] == ["live", "wip"]
        assert [d.slug for d in read_posts(tmp_path, skip_drafts=True)] == ["live"]

    def test_duplicate_slug_keeps_first(self, tmp_path: Path):
        _write_post(tmp_path, "a.mdx", "---\nslug: same\ntitle: First\n---\nx")
        _write_post(tmp_path, "b.mdx", "---\nslug: same\ntitle: Second\n---\nx")

        docs = read_posts(tmp_path)
        assert len(docs) == 1
        assert docs[0].title == "First"
