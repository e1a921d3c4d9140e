import math

import pytest

from engine.errors import IndexConsistencyError
from engine.index import InMemoryIndex
from engine.scorer import compute_scores
from engine.vector import QueryVector, compute_vector

from conftest import DOC_A, DOC_B


def test_scenario_scores(scenario_index):
    vector = compute_vector(["dog", "dog", "cat"], scenario_index)
    results = compute_scores(vector, scenario_index)

    q_norm = math.sqrt(17)
    assert [doc for doc, _ in results] == [DOC_B, DOC_A]
    assert results[0][1] == pytest.approx(12 / (3.0 * q_norm))
    assert results[1][1] == pytest.approx(6 / (2.236 * q_norm))
    assert results[0][1] == pytest.approx(0.9702, abs=1e-4)
    assert results[1][1] == pytest.approx(0.6507, abs=2e-4)


def test_empty_query_vector_scores_nothing(scenario_index):
    assert compute_scores(QueryVector(), scenario_index) == []


def test_zero_weight_query_scores_nothing(scenario_index):
    assert compute_scores(QueryVector(((1, 0.0),)), scenario_index) == []


def test_unknown_term_id_contributes_nothing(scenario_index):
    results = compute_scores(QueryVector(((1, 1.0), (99, 1.0))), scenario_index)
    assert [doc for doc, _ in results] == [DOC_A]


def test_only_documents_sharing_a_term_appear(small_index):
    vector = compute_vector(["cherri"], small_index)
    assert [doc for doc, _ in compute_scores(vector, small_index)] == [4]

    vector = compute_vector(["appl", "banana"], small_index)
    assert {doc for doc, _ in compute_scores(vector, small_index)} == {1, 2, 3}


def test_results_sorted_descending(small_index):
    vector = compute_vector(["appl", "banana", "cherri", "date", "date"], small_index)
    scores = [score for _, score in compute_scores(vector, small_index)]
    assert len(scores) == 4
    assert all(a >= b for a, b in zip(scores, scores[1:]))
    assert all(0.0 <= s <= 1.0 for s in scores)


def test_ties_break_by_ascending_doc_id():
    index = InMemoryIndex(
        vocabulary={"x": (1, 1.0)},
        postings={1: [(7, 1.0), (3, 1.0), (5, 1.0)]},
        documents={3: 2.0, 5: 2.0, 7: 2.0},
    )
    results = compute_scores(QueryVector(((1, 1.0),)), index)
    assert [doc for doc, _ in results] == [3, 5, 7]


def test_scaling_the_query_keeps_scores(small_index):
    vector = compute_vector(["appl", "date", "date", "banana"], small_index)
    scaled = QueryVector(tuple((tid, w * 3.5) for tid, w in vector))

    base = compute_scores(vector, small_index)
    rescaled = compute_scores(scaled, small_index)
    assert [doc for doc, _ in base] == [doc for doc, _ in rescaled]
    assert [s for _, s in rescaled] == pytest.approx([s for _, s in base])


def test_identical_document_and_query_score_one():
    index = InMemoryIndex(
        vocabulary={"x": (1, 1.0), "y": (2, 1.0)},
        postings={1: [(1, 3.0)], 2: [(1, 4.0)]},
        documents={1: 5.0},
    )
    results = compute_scores(QueryVector(((1, 3.0), (2, 4.0))), index)
    assert results == [(1, pytest.approx(1.0))]


def test_posting_to_unknown_document_is_fatal():
    index = InMemoryIndex(
        vocabulary={"x": (1, 1.0)},
        postings={1: [(1, 1.0), (99, 1.0)]},
        documents={1: 1.0},
    )
    with pytest.raises(IndexConsistencyError) as exc_info:
        compute_scores(QueryVector(((1, 1.0),)), index)
    assert exc_info.value.doc_id == 99
    assert exc_info.value.term_id == 1


def test_posting_to_zero_norm_document_is_fatal():
    index = InMemoryIndex(
        vocabulary={"x": (1, 1.0)},
        postings={1: [(1, 1.0)]},
        documents={1: 0.0},
    )
    with pytest.raises(IndexConsistencyError):
        compute_scores(QueryVector(((1, 1.0),)), index)
