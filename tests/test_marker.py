import pytest

from hexarctl.local.supervisor.errors import MarkerExistsError
from hexarctl.local.supervisor.marker import FileMarkerStore, MemoryMarkerStore


def test_read_without_marker_returns_none(file_store):
    assert file_store.read() is None
    assert not file_store.exists()


def test_write_then_read(file_store):
    file_store.write(1234)

    assert file_store.read() == 1234
    assert file_store.path.read_text().strip() == "1234"


def test_write_leaves_no_temp_files(file_store, tmp_path):
    file_store.write(99)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["hexar.pid"]


def test_second_write_loses_and_keeps_first_owner(file_store):
    file_store.write(100)

    with pytest.raises(MarkerExistsError) as excinfo:
        file_store.write(200)

    assert excinfo.value.pid == 100
    assert file_store.read() == 100


def test_two_stores_on_same_path_race_deterministically(tmp_path):
    first = FileMarkerStore(tmp_path / "hexar.pid")
    second = FileMarkerStore(tmp_path / "hexar.pid")

    first.write(11)
    with pytest.raises(MarkerExistsError):
        second.write(22)
    assert second.read() == 11


def test_clear_is_idempotent(file_store):
    file_store.write(5)
    file_store.clear()
    file_store.clear()

    assert file_store.read() is None


def test_write_creates_parent_directory(tmp_path):
    store = FileMarkerStore(tmp_path / "run" / "hexar.pid")
    store.write(7)
    assert store.read() == 7


@pytest.mark.parametrize("content", ["", "abc", "-5", "0"])
def test_malformed_marker_is_removed(file_store, content):
    file_store.path.write_text(content)

    assert file_store.read() is None
    assert not file_store.path.exists()


def test_invalid_pid_is_refused(file_store):
    with pytest.raises(ValueError):
        file_store.write(0)
    assert not file_store.path.exists()


def test_memory_store_follows_same_contract():
    store = MemoryMarkerStore()
    assert store.read() is None

    store.write(3)
    with pytest.raises(MarkerExistsError):
        store.write(4)
    assert store.read() == 3

    store.clear()
    store.clear()
    assert store.read() is None
