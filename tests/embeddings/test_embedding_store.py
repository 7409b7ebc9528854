"""Tests for the JSON embeddings cache."""

import json
import logging
from pathlib import Path

import pytest
from postgraph.embeddings.models import EmbeddingRecord, StalenessPolicy
from postgraph.embeddings.store import EmbeddingStore, content_hash, is_fresh
from postgraph.errors import CacheCorruptionError


def _record(slug: str, vector: list[float] | None = None, **kwargs) -> EmbeddingRecord:
    return EmbeddingRecord(
        slug=slug,
        title=slug.title(),
        tags=["t"],
        embedding=vector or [0.1, 0.2, 0.3],
        updated_at="2026-01-01T00:00:00+00:00",
        **kwargs,
    )


class TestContentHash:
    def test_stable(self):
        assert content_hash("abc") == content_hash("abc")

    def test_differs_on_edit(self):
        assert content_hash("abc") != content_hash("abd")


class TestIsFresh:
    def test_missing_record_is_stale(self):
        assert is_fresh(None, "text") is False

    def test_none_policy_always_fresh(self):
        record = _record("a", content_hash="whatever")
        assert is_fresh(record, "changed text", StalenessPolicy.NONE) is True

    def test_content_hash_policy(self):
        record = _record("a", content_hash=content_hash("Title | t"))
        assert is_fresh(record, "Title | t", StalenessPolicy.CONTENT_HASH) is True
        assert is_fresh(record, "Title | t | new excerpt", StalenessPolicy.CONTENT_HASH) is False

    def test_content_hash_policy_without_stored_hash(self):
        assert is_fresh(_record("a"), "Title", StalenessPolicy.CONTENT_HASH) is False


class TestEmbeddingStore:
    def test_missing_file_loads_empty(self, tmp_path: Path):
        assert EmbeddingStore(tmp_path / "embeddings.json").load() == {}

    def test_save_and_load(self, tmp_path: Path):
        store = EmbeddingStore(tmp_path / "embeddings.json")
        store.save({"a": _record("a"), "b": _record("b", [1.0, 0.0])})

        loaded = store.load()
        assert list(loaded) == ["a", "b"]
        assert loaded["b"].embedding == [1.0, 0.0]
        assert loaded["b"].dimensions == 2

    def test_saved_file_shape(self, tmp_path: Path):
        path = tmp_path / "embeddings.json"
        EmbeddingStore(path).save({"a": _record("a")})

        raw = json.loads(path.read_text())
        assert raw["version"] == "1.0"
        post = raw["posts"][0]
        assert post["updatedAt"] == "2026-01-01T00:00:00+00:00"
        assert "contentHash" not in post

    def test_reads_camel_case_cache(self, tmp_path: Path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({
            "version": "1.0",
            "posts": [{
                "slug": "hello",
                "title": "Hello",
                "tags": [],
                "embedding": [0.5, 0.5],
                "updatedAt": "2024-01-01T00:00:00.000Z",
            }],
        }))
        loaded = EmbeddingStore(path).load()
        assert loaded["hello"].updated_at == "2024-01-01T00:00:00.000Z"

    def test_corrupt_file_starts_fresh(self, tmp_path: Path, caplog):
        path = tmp_path / "embeddings.json"
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert EmbeddingStore(path).load() == {}
        assert "starting fresh" in caplog.text

    def test_wrong_schema_starts_fresh(self, tmp_path: Path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"posts": [{"slug": "a"}]}))
        assert EmbeddingStore(path).load() == {}

    def test_read_raises_on_corruption(self, tmp_path: Path):
        path = tmp_path / "embeddings.json"
        path.write_text("[1, 2")
        with pytest.raises(CacheCorruptionError):
            EmbeddingStore(path).read()

    def test_save_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / "nested" / "dir" / "embeddings.json"
        EmbeddingStore(path).save({})
        assert path.exists()
        assert json.loads(path.read_text())["posts"] == []
