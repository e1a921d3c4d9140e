"""Read-only index contract and a dict-backed implementation.

An index is three lookup tables, built elsewhere and never mutated while
queries run:

  vocabulary  term    → (term_id, idf)
  postings    term_id → [(doc_id, weight), ...]
  documents   doc_id  → norm of the document's full weight vector
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from engine.errors import IndexConsistencyError, IndexFormatError

Posting = tuple[int, float]


class IndexReader(ABC):
    @abstractmethod
    def lookup_term(self, term: str) -> tuple[int, float] | None:
        """Return (term_id, idf) for an indexed term, or None."""

    @abstractmethod
    def postings(self, term_id: int) -> list[Posting]:
        """Return the posting list of a term id; empty if unknown."""

    @abstractmethod
    def doc_norm(self, doc_id: int) -> float:
        """Return the stored norm of a document.

        Raises IndexConsistencyError if the document has no record.
        """


class InMemoryIndex(IndexReader):
    def __init__(
        self,
        vocabulary: Mapping[str, tuple[int, float]],
        postings: Mapping[int, list[Posting]],
        documents: Mapping[int, float],
    ):
        self._vocabulary = MappingProxyType(
            {term: (int(tid), float(idf)) for term, (tid, idf) in vocabulary.items()}
        )
        self._postings = MappingProxyType(
            {
                int(tid): tuple((int(doc), float(w)) for doc, w in plist)
                for tid, plist in postings.items()
            }
        )
        self._documents = MappingProxyType(
            {int(doc): float(n) for doc, n in documents.items()}
        )

    # ── Contract ────────────────────────────────────────────────────

    def lookup_term(self, term: str) -> tuple[int, float] | None:
        return self._vocabulary.get(term)

    def postings(self, term_id: int) -> list[Posting]:
        return list(self._postings.get(term_id, ()))

    def doc_norm(self, doc_id: int) -> float:
        try:
            return self._documents[doc_id]
        except KeyError:
            raise IndexConsistencyError(doc_id) from None

    # ── Views used by loaders and the CLI ──────────────────────────

    @property
    def vocabulary(self) -> Mapping[str, tuple[int, float]]:
        return self._vocabulary

    @property
    def posting_lists(self) -> Mapping[int, tuple[Posting, ...]]:
        return self._postings

    @property
    def documents(self) -> Mapping[int, float]:
        return self._documents

    def get_stats(self) -> dict:
        return {
            "terms": len(self._vocabulary),
            "postings": sum(len(plist) for plist in self._postings.values()),
            "documents": len(self._documents),
            "source": None,
            "loaded_at": None,
        }

    def check_consistency(self) -> list[str]:
        """Return human-readable violations of the index invariants."""
        problems: list[str] = []
        seen_ids: dict[int, str] = {}
        for term, (tid, idf) in sorted(self._vocabulary.items()):
            if tid in seen_ids:
                problems.append(f"Term id {tid} used by both '{seen_ids[tid]}' and '{term}'.")
            seen_ids[tid] = term
            if idf < 0:
                problems.append(f"Term '{term}' has negative idf {idf}.")
        for tid in sorted(self._postings):
            for doc_id, weight in self._postings[tid]:
                norm = self._documents.get(doc_id)
                if norm is None:
                    problems.append(f"Term id {tid} posts to unknown document {doc_id}.")
                elif norm <= 0:
                    problems.append(f"Document {doc_id} appears in postings but has norm {norm}.")
                if weight < 0:
                    problems.append(f"Term id {tid} has negative weight {weight} in document {doc_id}.")
        return problems

    # ── Loading ─────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryIndex:
        """Build from the JSON dump layout.

        JSON object keys are strings, so term ids and doc ids are
        converted back to ints here.
        """
        if not isinstance(data, dict):
            raise IndexFormatError("Index dump must be a JSON object.")
        missing = [k for k in ("vocabulary", "postings", "documents") if k not in data]
        if missing:
            raise IndexFormatError(f"Index dump is missing sections: {missing}.")

        try:
            vocabulary = {
                str(term): (int(entry[0]), float(entry[1]))
                for term, entry in data["vocabulary"].items()
            }
            postings = {
                int(tid): [(int(doc), float(w)) for doc, w in plist]
                for tid, plist in data["postings"].items()
            }
            documents = {int(doc): float(n) for doc, n in data["documents"].items()}
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            raise IndexFormatError(f"Malformed index dump: {e}") from e

        return cls(vocabulary, postings, documents)

    @classmethod
    def from_json(cls, path: str | Path) -> InMemoryIndex:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise IndexFormatError(f"Invalid JSON in {path}: {e}") from e
        return cls.from_dict(data)

