import threading
from pathlib import Path

import pytest

from conftest import corrupt_member, descriptor_xml, write_map_dir, write_map_zip


class CountingToken:
    """Reports cancelled once it has been asked `allowed` times."""

    def __init__(self, allowed: int):
        self.allowed = allowed
        self.checks = 0

    def is_cancelled(self) -> bool:
        self.checks += 1
        return self.checks > self.allowed


def _populate(user_root: Path, default_root: Path, count: int = 4):
    for i in range(count):
        write_map_dir(user_root / f"map_{i}", {"games/g.xml": descriptor_xml(f"Game {i}")})


@pytest.mark.integration
def test_same_game_in_both_roots_appears_once(map_roots):
    from game_chooser.catalog.model import CatalogModel
    from game_chooser.scanning.coordinator import ScanCoordinator

    user_root, default_root = map_roots
    write_map_zip(user_root / "Global War.zip", {"games/global_war.xml": descriptor_xml("Global War")})
    write_map_dir(default_root / "global_war", {"games/global_war.xml": descriptor_xml("Global War")})
    write_map_dir(default_root / "classic", {"games/classic.xml": descriptor_xml("Classic")})

    model = CatalogModel()
    report = model.populate(ScanCoordinator(user_root, default_root, max_workers=4))

    assert report.clean
    assert model.names() == ["Classic", "Global War"]
    winner = model.find_by_name("Global War")
    assert winner.uri.startswith("zip:")
    assert "Global%20War.zip" in winner.uri


@pytest.mark.integration
def test_corrupt_archive_does_not_affect_other_sources(map_roots):
    from game_chooser.scanning.coordinator import ScanCoordinator
    from game_chooser.scanning.diagnostics import DiagnosticKind
    from game_chooser.scanning.recovery import CorruptionRecoveryGate, SerialInteractionExecutor
    from game_chooser.ui.interaction import AutoAnswerChannel

    user_root, default_root = map_roots
    broken = write_map_zip(user_root / "broken.zip", {
        "games/a.xml": descriptor_xml("Broken A"),
        "games/b.xml": descriptor_xml("Broken B"),
    })
    corrupt_member(broken, "games/b.xml")
    write_map_zip(user_root / "fine.zip", {"games/f.xml": descriptor_xml("Fine")})
    write_map_dir(default_root / "loose", {"games/l.xml": descriptor_xml("Loose")})

    channel = AutoAnswerChannel(answer=True)
    executor = SerialInteractionExecutor(channel)
    try:
        coordinator = ScanCoordinator(
            user_root, default_root, recovery_gate=CorruptionRecoveryGate(executor), max_workers=3
        )
        report = coordinator.scan()
    finally:
        executor.close()

    assert sorted(e.name for e in report.entries) == ["Fine", "Loose"]
    assert len(channel.confirmations) == 1
    assert not broken.exists()
    assert [d.kind for d in report.diagnostics] == [DiagnosticKind.CORRUPT_ARCHIVE]


def test_parse_error_only_drops_that_descriptor(map_roots):
    from game_chooser.scanning.coordinator import ScanCoordinator
    from game_chooser.scanning.diagnostics import DiagnosticKind

    user_root, default_root = map_roots
    write_map_dir(user_root / "m", {
        "games/bad.xml": "<game><info name='x'>",
        "games/good.xml": descriptor_xml("Good"),
    })

    report = ScanCoordinator(user_root, default_root).scan()

    assert [e.name for e in report.entries] == ["Good"]
    assert report.diagnostics[0].kind is DiagnosticKind.MALFORMED_DESCRIPTOR


def test_empty_roots_complete_with_no_entries(tmp_path: Path):
    from game_chooser.app.models import ScanState
    from game_chooser.scanning.coordinator import ScanCoordinator

    coordinator = ScanCoordinator(tmp_path / "none", None)
    report = coordinator.scan()

    assert report.entries == []
    assert report.state is ScanState.COMPLETED
    assert coordinator.state is ScanState.COMPLETED
    assert report.total_sources == 0


def test_cancel_before_scan_dispatches_nothing(map_roots):
    from game_chooser.app.models import CancelToken, ScanState
    from game_chooser.scanning.coordinator import ScanCoordinator
    from game_chooser.scanning.diagnostics import DiagnosticKind

    user_root, default_root = map_roots
    _populate(user_root, default_root)
    token = CancelToken()
    token.cancel()

    report = ScanCoordinator(user_root, default_root).scan(token)

    assert report.state is ScanState.CANCELLED
    assert report.cancelled
    assert report.dispatched == 0
    assert report.entries == []
    assert report.diagnostics[-1].kind is DiagnosticKind.CANCELLED


def test_cancel_mid_scan_returns_subset(map_roots):
    from game_chooser.scanning.coordinator import ScanCoordinator

    user_root, default_root = map_roots
    _populate(user_root, default_root, count=5)

    report = ScanCoordinator(user_root, default_root, max_workers=2).scan(CountingToken(allowed=2))

    full = {f"Game {i}" for i in range(5)}
    names = {e.name for e in report.entries}
    assert report.cancelled
    assert report.dispatched == 2
    assert names <= full
    assert names == {"Game 0", "Game 1"}


def test_timeout_returns_partial_results(map_roots):
    from game_chooser.app.models import ScanState
    from game_chooser.core.descriptor import XmlDescriptorParser
    from game_chooser.scanning.coordinator import ScanCoordinator
    from game_chooser.scanning.diagnostics import DiagnosticKind

    user_root, default_root = map_roots
    write_map_dir(user_root / "fast", {"games/g.xml": descriptor_xml("Fast")})
    write_map_dir(user_root / "slow", {"games/g.xml": descriptor_xml("Slow")})
    release = threading.Event()
    real = XmlDescriptorParser()

    class StallingParser:
        def parse(self, uri):
            if "/slow/" in uri:
                release.wait(10)
            return real.parse(uri)

    coordinator = ScanCoordinator(user_root, default_root, parser=StallingParser(),
                                  max_workers=2, shutdown_timeout=0.3)
    try:
        report = coordinator.scan()
    finally:
        release.set()

    assert report.timed_out
    assert report.state is ScanState.COMPLETED
    assert [e.name for e in report.entries] == ["Fast"]
    assert report.diagnostics[-1].kind is DiagnosticKind.TIMEOUT


def test_user_root_wins_regardless_of_finish_order(map_roots):
    from game_chooser.scanning.coordinator import ScanCoordinator

    user_root, default_root = map_roots
    write_map_dir(user_root / "u", {"games/g.xml": descriptor_xml("Shared")})
    write_map_dir(default_root / "d", {"games/g.xml": descriptor_xml("Shared")})

    for workers in (1, 4):
        report = ScanCoordinator(user_root, default_root, max_workers=workers).scan()
        assert len(report.entries) == 1
        assert "/u/" in report.entries[0].uri


def test_accumulator_drops_writes_after_close():
    from game_chooser.catalog.model import CatalogEntry
    from game_chooser.scanning.coordinator import EntryAccumulator

    accumulator = EntryAccumulator()
    accumulator.add_all([CatalogEntry("A", "file:///a.xml")])
    accumulator.close()

    assert accumulator.add_all([CatalogEntry("B", "file:///b.xml")]) == 0
    assert accumulator.dropped_writes == 1
    assert [e.name for e in accumulator.snapshot()] == ["A"]


@pytest.mark.parametrize(
    "configured, cpus, expected",
    [(0, 8, 4), (0, 1, 1), (0, 3, 1), (6, 2, 6), (100, 2, 32), (0, 128, 32)],
)
def test_worker_count(configured, cpus, expected):
    from game_chooser.scanning.coordinator import resolve_worker_count

    assert resolve_worker_count(configured, cpu_count=cpus) == expected


def test_late_failure_from_timed_out_scan_stays_out_of_next_report(map_roots):
    from game_chooser.core.descriptor import XmlDescriptorParser
    from game_chooser.scanning.coordinator import ScanCoordinator
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    user_root, default_root = map_roots
    write_map_dir(user_root / "fast", {"games/g.xml": descriptor_xml("Fast")})
    write_map_dir(user_root / "slow", {"games/g.xml": descriptor_xml("Slow")})
    release = threading.Event()
    late_reported = threading.Event()
    second_scan = threading.Event()
    stalled = []
    real = XmlDescriptorParser()

    class StallingParser:
        def parse(self, uri):
            if "/slow/" in uri and not stalled:
                stalled.append(uri)
                release.wait(10)
                raise RuntimeError("late failure")
            if "/fast/" in uri and second_scan.is_set():
                # Let the first scan's stalled parse fail while this scan is running.
                release.set()
                late_reported.wait(10)
            return real.parse(uri)

    def on_report(entry):
        if entry.kind is DiagnosticKind.DESCRIPTOR_ERROR:
            late_reported.set()

    shared = ScanDiagnostics(on_report=on_report)
    coordinator = ScanCoordinator(user_root, default_root, parser=StallingParser(),
                                  diagnostics=shared, max_workers=2, shutdown_timeout=0.3)
    try:
        first = coordinator.scan()
        coordinator.shutdown_timeout = 10
        second_scan.set()
        second = coordinator.scan()
    finally:
        release.set()

    assert first.timed_out
    assert late_reported.is_set()
    assert not second.timed_out
    assert sorted(e.name for e in second.entries) == ["Fast", "Slow"]
    assert [d.kind for d in second.diagnostics] == []
    assert shared.has(DiagnosticKind.DESCRIPTOR_ERROR)
    assert not any(d.kind is DiagnosticKind.DESCRIPTOR_ERROR for d in first.diagnostics)


def test_descriptor_folder_without_trailing_slash_matches_only_that_folder(map_roots):
    from game_chooser.scanning.coordinator import ScanCoordinator

    user_root, default_root = map_roots
    write_map_zip(user_root / "mixed.zip", {
        "games/real.xml": descriptor_xml("Real"),
        "gamesX/decoy.xml": descriptor_xml("Decoy"),
    })
    write_map_dir(default_root / "loose", {
        "games/loose.xml": descriptor_xml("Loose"),
        "games_old/stale.xml": descriptor_xml("Stale"),
    })

    coordinator = ScanCoordinator(user_root, default_root, descriptor_folder="games")
    report = coordinator.scan()

    assert coordinator.descriptor_folder == "games/"
    assert sorted(e.name for e in report.entries) == ["Loose", "Real"]
