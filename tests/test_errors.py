"""Tests for the error taxonomy and PipelineReport."""

from postgraph.errors import (
    CacheCorruptionError,
    DimensionMismatchError,
    ExternalCallError,
    PipelineReport,
    PostgraphError,
    SetupError,
    SourceReadError,
)


class TestErrorTaxonomy:
    def test_all_errors_share_a_base(self):
        for cls in (SetupError, SourceReadError, CacheCorruptionError, ExternalCallError):
            assert issubclass(cls, PostgraphError)

    def test_dimension_mismatch_message(self):
        err = DimensionMismatchError(1536, 3072)
        assert isinstance(err, PostgraphError)
        assert (err.left, err.right) == (1536, 3072)
        assert str(err) == "Vector dimensions differ: 1536 != 3072"


class TestPipelineReport:
    def test_empty_report(self):
        report = PipelineReport()
        assert report.has_errors is False
        assert report.error_count == 0
        assert report.summary() == "No errors"

    def test_add_error(self):
        report = PipelineReport()
        report.add_error("read", "bad file", source="a.mdx", error_type="source_read_error")

        err = report.errors[0]
        assert (err.stage, err.message, err.source, err.error_type) == (
            "read", "bad file", "a.mdx", "source_read_error",
        )
        assert report.has_errors is True

    def test_errors_for_and_summary(self):
        report = PipelineReport()
        report.add_error("read", "one")
        report.add_error("embeddings", "two")
        report.add_error("read", "three")

        assert [e.message for e in report.errors_for("read")] == ["one", "three"]
        assert report.summary() == "read: 2 error(s)\nembeddings: 1 error(s)"
