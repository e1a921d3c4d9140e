import sqlite3

import pytest

from engine.errors import IndexConsistencyError, IndexFormatError
from engine.models import CosineModel
from engine.store import IndexStore

from conftest import DOC_A, DOC_B


@pytest.fixture
def db_path(tmp_path, scenario_index):
    path = tmp_path / "index.db"
    with IndexStore(str(path), read_only=False) as store:
        store.write_index(scenario_index, source="scenario")
    return str(path)


def test_store_matches_in_memory_index(db_path, scenario_index):
    with IndexStore(db_path) as store:
        assert store.lookup_term("cat") == scenario_index.lookup_term("cat")
        assert store.lookup_term("zebra") is None
        assert store.postings(2) == scenario_index.postings(2)
        assert store.postings(99) == []
        assert store.doc_norm(DOC_A) == pytest.approx(2.236)


def test_store_unknown_document_raises(db_path):
    with IndexStore(db_path) as store:
        with pytest.raises(IndexConsistencyError):
            store.doc_norm(404)


def test_store_ranks_like_in_memory_index(db_path, scenario_index, plain_processor):
    model = CosineModel()
    with IndexStore(db_path) as store:
        from_db = model.run_query("dog dog cat", store, plain_processor)
    in_memory = model.run_query("dog dog cat", scenario_index, plain_processor)
    assert [doc for doc, _ in from_db] == [DOC_B, DOC_A]
    assert [s for _, s in from_db] == pytest.approx([s for _, s in in_memory])


def test_read_only_store_refuses_writes(db_path, scenario_index):
    with IndexStore(db_path) as store:
        with pytest.raises(PermissionError):
            store.write_index(scenario_index)


def test_read_only_store_requires_existing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        IndexStore(str(tmp_path / "nope.db"))


def test_stats_and_delete_all(db_path):
    with IndexStore(db_path, read_only=False) as store:
        stats = store.get_stats()
        assert (stats["terms"], stats["postings"], stats["documents"]) == (2, 3, 2)
        assert stats["source"] == "scenario"
        store.delete_all()
        assert store.get_stats()["terms"] == 0


def test_non_database_file_is_a_format_error(tmp_path):
    path = tmp_path / "index.db"
    path.write_text("not a database")
    with pytest.raises(IndexFormatError, match="not a Sieve index"):
        IndexStore(str(path))
    with pytest.raises(IndexFormatError):
        IndexStore(str(path), read_only=False)


def test_database_without_index_tables_is_a_format_error(tmp_path):
    path = tmp_path / "other.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE vocabulary (term TEXT)")
    conn.commit()
    conn.close()
    with pytest.raises(IndexFormatError, match="missing tables"):
        IndexStore(str(path))
