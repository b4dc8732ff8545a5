from pathlib import Path

from conftest import corrupt_member, descriptor_xml, write_map_zip


class RecordingGate:
    def __init__(self):
        self.handled = []
        self.sinks = []

    def handle(self, path, diagnostics=None):
        self.handled.append(Path(path))
        self.sinks.append(diagnostics)


def _source(path: Path):
    from game_chooser.scanning.sources import GameSource, SourceKind, SourcePriority

    return GameSource(path, SourceKind.ARCHIVE, SourcePriority.USER_ROOT)


def test_reads_descriptors_under_games_folder(tmp_path: Path):
    from game_chooser.scanning.archive_reader import read_archive
    from game_chooser.scanning.ingestor import DescriptorIngestor

    archive = write_map_zip(tmp_path / "Big World.zip", {
        "games/one.xml": descriptor_xml("One"),
        "games/two.XML": descriptor_xml("Two"),
        "maps/polygons.txt": "x",
        "other.xml": descriptor_xml("Outside"),
    })

    result = read_archive(_source(archive), DescriptorIngestor())

    assert result.opened and not result.corrupt
    assert sorted(e.name for e in result.entries) == ["One", "Two"]
    for entry in result.entries:
        assert entry.uri.startswith("zip:file://")
        assert " " not in entry.uri
        assert entry.source_priority == 1


def test_corrupt_member_discards_archive_and_asks_gate(tmp_path: Path):
    from game_chooser.scanning.archive_reader import read_archive
    from game_chooser.scanning.diagnostics import DiagnosticKind
    from game_chooser.scanning.ingestor import DescriptorIngestor

    archive = write_map_zip(tmp_path / "broken.zip", {
        "games/a.xml": descriptor_xml("A"),
        "games/b.xml": descriptor_xml("B"),
    })
    corrupt_member(archive, "games/b.xml")
    gate = RecordingGate()
    ingestor = DescriptorIngestor()

    result = read_archive(_source(archive), ingestor, gate)

    assert result.corrupt is True
    assert result.corrupt_entry == "games/b.xml"
    assert result.entries == []
    assert gate.handled == [archive]
    assert gate.sinks == [ingestor.diagnostics]
    assert ingestor.diagnostics.has(DiagnosticKind.CORRUPT_ARCHIVE)


def test_unopenable_archive_is_reported_without_gate(tmp_path: Path):
    from game_chooser.scanning.archive_reader import read_archive
    from game_chooser.scanning.diagnostics import DiagnosticKind
    from game_chooser.scanning.ingestor import DescriptorIngestor

    archive = tmp_path / "not_a_zip.zip"
    archive.write_bytes(b"this is not a zip file")
    gate = RecordingGate()
    ingestor = DescriptorIngestor()

    result = read_archive(_source(archive), ingestor, gate)

    assert result.opened is False
    assert result.entries == []
    assert gate.handled == []
    assert ingestor.diagnostics.has(DiagnosticKind.ARCHIVE_UNREADABLE)


def test_bad_descriptor_does_not_drop_siblings(tmp_path: Path):
    from game_chooser.scanning.archive_reader import read_archive
    from game_chooser.scanning.ingestor import DescriptorIngestor

    archive = write_map_zip(tmp_path / "mixed.zip", {
        "games/bad.xml": "<game><info name='x'>",
        "games/good.xml": descriptor_xml("Good"),
    })
    gate = RecordingGate()

    result = read_archive(_source(archive), DescriptorIngestor(), gate)

    assert [e.name for e in result.entries] == ["Good"]
    assert gate.handled == []


def test_descriptor_member_filter():
    from game_chooser.scanning.archive_reader import is_descriptor_member

    assert is_descriptor_member("games/a.xml")
    assert is_descriptor_member("games/sub/a.Xml")
    assert not is_descriptor_member("a.xml")
    assert not is_descriptor_member("games/a.txt")
    assert is_descriptor_member("scenarios/a.xml", "scenarios/")


def test_descriptor_folder_is_matched_as_a_whole_path_segment():
    from game_chooser.scanning.archive_reader import is_descriptor_member

    assert is_descriptor_member("games/a.xml", "games")
    assert is_descriptor_member("games/a.xml", "/games/")
    assert not is_descriptor_member("gamesX/a.xml", "games")
    assert not is_descriptor_member("games_old/a.xml", "games")
