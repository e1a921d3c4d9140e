"""Cosine scoring, term-at-a-time.

For each query term, every posting adds its share of the dot product,
already divided by both vector norms:

    w(t, d) · w(t, q) / (|d| · |q|)

Summed over the shared terms this is exactly cos(q, d).  Only documents
that share a term with the query are ever touched, so the accumulator is
a dict keyed by doc id rather than a dense array over the collection.
"""

from __future__ import annotations

import logging

from engine.errors import IndexConsistencyError
from engine.index import IndexReader
from engine.vector import QueryVector, norm

log = logging.getLogger(__name__)


def rank_scores(scores: dict[int, float]) -> list[tuple[int, float]]:
    """Highest score first; equal scores by ascending doc id."""
    return sorted(scores.items(), key=lambda x: (-x[1], x[0]))


def compute_scores(query_vector: QueryVector, index: IndexReader) -> list[tuple[int, float]]:
    """Score every document sharing a term with the query.

    Returns [(doc_id, cosine)] ranked by `rank_scores`.
    """
    query_norm = norm(query_vector)
    if query_norm == 0:
        return []

    scores: dict[int, float] = {}

    # Fixed term order keeps floating-point summation reproducible.
    for term_id, query_weight in sorted(query_vector.entries):
        for doc_id, doc_weight in index.postings(term_id):
            try:
                doc_norm = index.doc_norm(doc_id)
            except IndexConsistencyError as e:
                raise IndexConsistencyError(doc_id, term_id) from e
            if doc_norm <= 0:
                raise IndexConsistencyError(doc_id, term_id)
            contribution = doc_weight * query_weight / (doc_norm * query_norm)
            scores[doc_id] = scores.get(doc_id, 0.0) + contribution

    log.debug("Scored %d document(s) for %d query term(s)", len(scores), len(query_vector))
    return rank_scores(scores)
