from hexarctl.local.supervisor.marker import MemoryMarkerStore
from hexarctl.local.supervisor.status import StatusInspector


def _inspector(tmp_path, store, table, log_lines=10):
    return StatusInspector(store, table, tmp_path / "logs" / "hexar.log", tmp_path / "config.toml", log_lines)


def test_no_marker_reports_not_running_without_side_effects(tmp_path, table):
    store = MemoryMarkerStore()

    report = _inspector(tmp_path, store, table).status(detailed=False)

    assert not report.running
    assert report.pid is None
    assert not report.stale_marker_cleared
    assert report.recent_log_lines == []
    assert list(tmp_path.iterdir()) == []


def test_stale_marker_is_cleared(tmp_path, table):
    store = MemoryMarkerStore(31337)

    report = _inspector(tmp_path, store, table).status()

    assert not report.running
    assert report.stale_marker_cleared
    assert store.read() is None


def test_stale_file_marker_is_removed(tmp_path, table, file_store):
    file_store.write(31337)

    report = _inspector(tmp_path, file_store, table).status()

    assert report.stale_marker_cleared
    assert not file_store.path.exists()


def test_live_process_detailed_report(tmp_path, table):
    table.spawn(1200)
    store = MemoryMarkerStore(1200)

    report = _inspector(tmp_path, store, table).status(detailed=True)

    assert report.running
    assert report.pid == 1200
    assert report.snapshot is not None
    # The fake table reports no metrics, so every field is unknown.
    assert report.snapshot.memory_kb is None
    assert report.snapshot.cpu_percent is None
    assert report.snapshot.started == "Unknown"
    assert store.read() == 1200


def test_summary_report_skips_snapshot(tmp_path, table):
    table.spawn(1200)

    report = _inspector(tmp_path, MemoryMarkerStore(1200), table).status(detailed=False)

    assert report.running
    assert report.snapshot is None


def test_recent_log_lines_are_attached(tmp_path, table):
    log_path = tmp_path / "logs" / "hexar.log"
    log_path.parent.mkdir()
    log_path.write_text("".join(f"line {i}\n" for i in range(25)))

    report = _inspector(tmp_path, MemoryMarkerStore(), table).status()

    assert report.recent_log_lines == [f"line {i}" for i in range(15, 25)]


def test_config_path_reported_only_when_present(tmp_path, table):
    assert _inspector(tmp_path, MemoryMarkerStore(), table).status().config_path is None

    (tmp_path / "config.toml").write_text("")
    assert _inspector(tmp_path, MemoryMarkerStore(), table).status().config_path == tmp_path / "config.toml"
