"""Tests for cosine similarity."""

import pytest
from postgraph.errors import DimensionMismatchError
from postgraph.graph.similarity import SimilarityMode, cosine_similarity


class TestCosineSimilarity:
    def test_identical_vectors(self):
        v = [0.3, -1.2, 4.5, 0.01]
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        v = [1.0, 2.0, 3.0]
        assert cosine_similarity(v, [-x for x in v]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == 0.0

    def test_commutative(self):
        a, b = [0.1, 0.7, -0.2], [0.9, 0.4, 0.3]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_scale_invariant(self):
        a, b = [1.0, 2.0], [2.0, 1.0]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity([10.0, 20.0], b))

    def test_known_value(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(0.70710678)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0

    def test_result_stays_in_range(self):
        v = [1e-3, 3e-3, 7e-3]
        assert -1.0 <= cosine_similarity(v, v) <= 1.0

    def test_strict_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
        assert exc_info.value.left == 2
        assert exc_info.value.right == 3

    def test_lenient_mismatch_scores_zero(self):
        score = cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0], mode=SimilarityMode.LENIENT)
        assert score == 0.0
