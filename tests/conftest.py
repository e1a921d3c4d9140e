import json

import pytest

from engine.index import InMemoryIndex
from engine.text import TextProcessor, identity_stem

DOC_A = 10
DOC_B = 20


@pytest.fixture
def scenario_index():
    """cat/dog index: 'dog dog cat' should rank B above A."""
    return InMemoryIndex(
        vocabulary={"cat": (1, 1.0), "dog": (2, 2.0)},
        postings={1: [(DOC_A, 2.0)], 2: [(DOC_A, 1.0), (DOC_B, 3.0)]},
        documents={DOC_A: 2.236, DOC_B: 3.0},
    )


@pytest.fixture
def small_index():
    return InMemoryIndex(
        vocabulary={
            "appl": (1, 1.2),
            "banana": (2, 0.8),
            "cherri": (3, 2.1),
            "date": (4, 0.5),
        },
        postings={
            1: [(1, 1.2), (2, 2.4)],
            2: [(2, 0.8), (3, 1.6)],
            3: [(4, 2.1)],
            4: [(1, 0.5), (3, 0.5), (4, 0.5)],
        },
        documents={1: 1.3, 2: 2.53, 3: 1.676, 4: 2.158},
    )


@pytest.fixture
def plain_processor():
    return TextProcessor(stemmer=identity_stem)


@pytest.fixture
def stopwords_file(tmp_path):
    path = tmp_path / "stopwords.txt"
    path.write_text("the\na\nof\n\n  and  \nrun\n", encoding="utf-8")
    return path


@pytest.fixture
def scenario_dump(tmp_path):
    path = tmp_path / "index.json"
    path.write_text(
        json.dumps(
            {
                "vocabulary": {"cat": [1, 1.0], "dog": [2, 2.0]},
                "postings": {"1": [[DOC_A, 2.0]], "2": [[DOC_A, 1.0], [DOC_B, 3.0]]},
                "documents": {str(DOC_A): 2.236, str(DOC_B): 3.0},
            }
        )
    )
    return path
