"""Query vectors: log-scaled term frequency × idf, and their L2 norm."""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from engine.index import IndexReader

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryVector:
    """Sparse query weights, one entry per distinct in-vocabulary term.

    `entries` is sorted by term id.  `unknown_terms` lists the query terms
    that were dropped because the vocabulary does not contain them.
    """

    entries: tuple[tuple[int, float], ...] = ()
    unknown_terms: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def term_frequency_weight(freq: int) -> float:
    """1 + log2(freq); a single occurrence weighs exactly 1."""
    return 1.0 + math.log2(freq)


def compute_vector(terms: list[str], index: IndexReader) -> QueryVector:
    counts = Counter(terms)
    entries: list[tuple[int, float]] = []
    unknown: list[str] = []

    # Counter keeps first-appearance order, so `unknown` does too.
    for term, freq in counts.items():
        entry = index.lookup_term(term)
        if entry is None:
            unknown.append(term)
            continue
        term_id, idf = entry
        entries.append((term_id, term_frequency_weight(freq) * idf))

    if unknown:
        log.debug("Skipping %d out-of-vocabulary term(s): %s", len(unknown), unknown)

    entries.sort(key=lambda e: e[0])
    return QueryVector(tuple(entries), tuple(unknown))


def norm(vector: QueryVector | Iterable[tuple[int, float]]) -> float:
    """Euclidean length of a weighted term vector; 0.0 when empty."""
    weights = np.fromiter((w for _, w in vector), dtype=np.float64)
    if weights.size == 0:
        return 0.0
    return float(np.linalg.norm(weights))
