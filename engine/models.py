"""Retrieval models.

A model turns query text into a ranked [(doc_id, score)] list against a
read-only index.  Text processing and the index contract are shared by
all models; how queries are weighted and scored is up to each model.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from engine.index import IndexReader
from engine.scorer import compute_scores
from engine.text import TextProcessor
from engine.vector import QueryVector, compute_vector


@dataclass
class QueryResult:
    results: list[tuple[int, float]]
    terms: list[str]
    unknown_terms: list[str]

    def to_dict(self) -> dict:
        return {
            "results": [
                {"doc_id": doc_id, "score": round(score, 6)} for doc_id, score in self.results
            ],
            "terms": self.terms,
            "unknown_terms": self.unknown_terms,
        }


class RetrievalModel(ABC):
    name: str = ""

    @abstractmethod
    def run_query(
        self,
        query_text: str,
        index: IndexReader,
        processor: TextProcessor,
    ) -> list[tuple[int, float]]:
        """Return (doc_id, score) pairs, best first."""

    def explain_query(
        self,
        query_text: str,
        index: IndexReader,
        processor: TextProcessor,
    ) -> QueryResult:
        """Like run_query, but also report processed and dropped terms."""
        terms = processor.process_text(query_text)
        unknown = [t for t in dict.fromkeys(terms) if index.lookup_term(t) is None]
        return QueryResult(
            results=self.run_query(query_text, index, processor),
            terms=terms,
            unknown_terms=unknown,
        )


class CosineModel(RetrievalModel):
    """Vector space model: cosine similarity over tf·idf weights."""

    name = "cosine"

    def run_query(
        self,
        query_text: str,
        index: IndexReader,
        processor: TextProcessor,
    ) -> list[tuple[int, float]]:
        return self.explain_query(query_text, index, processor).results

    def explain_query(
        self,
        query_text: str,
        index: IndexReader,
        processor: TextProcessor,
    ) -> QueryResult:
        # The query vector already knows which terms it dropped.
        terms = processor.process_text(query_text)
        vector = self.compute_vector(terms, index)
        return QueryResult(
            results=self.compute_scores(vector, index),
            terms=terms,
            unknown_terms=list(vector.unknown_terms),
        )

    def compute_vector(self, terms: list[str], index: IndexReader) -> QueryVector:
        return compute_vector(terms, index)

    def compute_scores(self, query_vector: QueryVector, index: IndexReader) -> list[tuple[int, float]]:
        return compute_scores(query_vector, index)


MODELS: dict[str, type[RetrievalModel]] = {
    CosineModel.name: CosineModel,
}


def get_model(name: str) -> RetrievalModel:
    try:
        return MODELS[name]()
    except KeyError:
        raise ValueError(f"Unknown retrieval model '{name}'; expected one of {sorted(MODELS)}.") from None


def search(
    query_text: str,
    index: IndexReader,
    processor: TextProcessor,
    model: str = "cosine",
    top_k: int | None = None,
) -> QueryResult:
    """Run a named model and keep the best `top_k` results (all if None)."""
    result = get_model(model).explain_query(query_text, index, processor)
    if top_k is not None:
        result.results = result.results[:top_k]
    return result


def rank(
    query_text: str,
    index: IndexReader,
    processor: TextProcessor,
    model: str = "cosine",
    top_k: int | None = None,
) -> list[tuple[int, float]]:
    return search(query_text, index, processor, model, top_k).results
