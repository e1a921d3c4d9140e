"""Query text processing: tokenize → lowercase → drop stopwords → stem.

The stopword list must hold normalized, *unstemmed* forms: the stopword
check runs before stemming, so a list of stems would silently filter nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from nltk.stem import PorterStemmer

from engine.errors import StopwordLoadError

log = logging.getLogger(__name__)

Stemmer = Callable[[str], str]

# Classic Porter rules, matching indexes built with the reference stemmer.
_porter = PorterStemmer(mode=PorterStemmer.MARTIN_EXTENSIONS)


def porter_stem(term: str) -> str:
    """Porter stem of an already-lowercased term."""
    return _porter.stem(term, to_lowercase=False)


def identity_stem(term: str) -> str:
    return term


def load_stopwords(path: str | Path) -> frozenset[str]:
    """Read a line-delimited stopword list.  Blank lines are ignored."""
    try:
        with open(path, encoding="utf-8") as f:
            words = frozenset(line.strip().lower() for line in f if line.strip())
    except (OSError, UnicodeDecodeError) as e:
        raise StopwordLoadError(f"Cannot read stopword list {path}: {e}") from e
    log.debug("Loaded %d stopwords from %s", len(words), path)
    return words


class TextProcessor:
    """Turns raw text into the ordered list of index terms.

    Duplicates are kept and order of appearance is preserved; the query
    vector builder folds multiplicities into term frequency.
    """

    def __init__(
        self,
        stopwords_path: str | Path | None = None,
        stemmer: Stemmer = porter_stem,
    ):
        # Loaded before any attribute is set: a failed load leaves no processor.
        self.stopwords = (
            load_stopwords(stopwords_path) if stopwords_path is not None else frozenset()
        )
        self.stemmer = stemmer

    def process_text(self, text: str) -> list[str]:
        terms: list[str] = []
        for token in self.tokenize(text):
            term = self.normalize(token)
            if not self.is_stopword(term):
                terms.append(self.stem(term))
        return terms

    def tokenize(self, text: str) -> list[str]:
        return text.split()

    def normalize(self, token: str) -> str:
        return token.lower()

    def is_stopword(self, term: str) -> bool:
        return term in self.stopwords

    def stem(self, term: str) -> str:
        return self.stemmer(term)
