import pytest

from liveguard.database import DatabaseManager
from liveguard.inference.gallery import GalleryStore


@pytest.fixture
def database(tmp_path):
    return DatabaseManager(tmp_path / "gallery.db")


def test_label_may_own_several_embeddings(vector):
    store = GalleryStore()
    assert store.enroll("alice", vector(0.1)) == 1
    assert store.enroll("alice", vector(0.2)) == 2
    assert store.enroll("bob", vector(0.9)) == 1
    assert store.labels() == ["alice", "bob"]
    assert store.count() == 3


def test_snapshot_is_isolated_from_later_enrollment(vector):
    store = GalleryStore()
    store.enroll("alice", vector(0.1))
    snapshot = store.load_gallery()
    store.enroll("alice", vector(0.2))
    store.enroll("bob", vector(0.3))
    assert len(snapshot) == 1
    assert len(snapshot[0].embeddings) == 1
    with pytest.raises(ValueError):
        snapshot[0].embeddings[0][0] = 1.0


def test_first_enrollment_fixes_embedding_size(vector):
    store = GalleryStore()
    store.enroll("alice", vector(size=4))
    with pytest.raises(ValueError):
        store.enroll("bob", vector(size=8))
    assert store.labels() == ["alice"]


def test_configured_size_is_enforced(vector):
    store = GalleryStore(embedding_size=128)
    with pytest.raises(ValueError):
        store.enroll("alice", vector(size=4))
    assert store.count() == 0


@pytest.mark.parametrize("label", ["", "   ", None])
def test_blank_label_rejected(label, vector):
    with pytest.raises(ValueError):
        GalleryStore().enroll(label, vector())


def test_label_is_stripped(vector):
    store = GalleryStore()
    store.enroll("  alice ", vector())
    assert store.labels() == ["alice"]


def test_enrollment_persists_across_instances(database, vector):
    store = GalleryStore(database=database)
    store.enroll("alice", vector(0.1))
    store.enroll("alice", vector(0.2))
    store.enroll("bob", vector(0.9))

    reopened = GalleryStore(database=DatabaseManager(database.db_path))
    entries = {entry.label: entry for entry in reopened.load_gallery()}
    assert set(entries) == {"alice", "bob"}
    assert len(entries["alice"].embeddings) == 2
    assert float(entries["alice"].embeddings[1][0]) == pytest.approx(0.2)
    assert reopened.describe()["embedding_size"] == 4


def test_rejected_enrollment_is_not_persisted(database, vector):
    store = GalleryStore(database=database, embedding_size=4)
    with pytest.raises(ValueError):
        store.enroll("alice", vector(size=3))
    assert database.load_embeddings() == []


def test_remove_label(database, vector):
    store = GalleryStore(database=database)
    store.enroll("alice", vector())
    assert store.remove("alice") is True
    assert store.remove("alice") is False
    assert store.load_gallery() == ()
    assert database.load_embeddings() == []
