import random


def _entries(*names):
    from game_chooser.catalog.model import CatalogEntry

    return [CatalogEntry(name, f"file:///maps/{name.replace(' ', '_')}.xml") for name in names]


def test_build_sorts_case_insensitively_and_dedupes():
    from game_chooser.catalog.model import CatalogEntry, CatalogModel

    model = CatalogModel()
    model.build(_entries("beta", "Alpha", "gamma") + [CatalogEntry("Alpha", "file:///other.xml")])

    assert model.names() == ["Alpha", "beta", "gamma"]
    assert model.find_by_name("Alpha").uri == "file:///maps/Alpha.xml"


def test_order_does_not_depend_on_input_order():
    from game_chooser.catalog.model import sort_entries

    entries = _entries("Pacific", "europe", "Big World", "napoleonic", "Age of Tribes")
    expected = [e.name for e in sort_entries(entries)]
    for seed in range(5):
        shuffled = list(entries)
        random.Random(seed).shuffle(shuffled)
        assert [e.name for e in sort_entries(shuffled)] == expected


def test_entry_equality_is_by_name():
    from game_chooser.catalog.model import CatalogEntry

    a = CatalogEntry("Same", "file:///a.xml")
    b = CatalogEntry("Same", "zip:file:///b.zip!/games/b.xml")

    assert a == b
    assert len({a, b}) == 1
    assert a != CatalogEntry("Other", "file:///a.xml")


def test_find_remove_and_listeners():
    from game_chooser.catalog.model import EVENT_REMOVED, EVENT_RESET, CatalogModel

    events = []
    model = CatalogModel()
    model.add_listener(lambda event, entry: events.append((event, entry.name if entry else None)))

    model.build(_entries("One", "Two"))
    two = model.find_by_name("Two")
    assert model.index_of(two) == 1
    assert model.remove(two) is True
    assert model.remove(two) is False
    assert model.find_by_name("Two") is None
    assert model.find_by_name("two") is None
    assert len(model) == 1 and model[0].name == "One"

    assert events == [(EVENT_RESET, None), (EVENT_REMOVED, "Two")]


def test_failing_listener_does_not_break_model():
    from game_chooser.catalog.model import CatalogModel

    def broken(event, entry):
        raise RuntimeError("listener bug")

    model = CatalogModel()
    model.add_listener(broken)
    model.build(_entries("One"))
    model.remove_listener(broken)

    assert model.names() == ["One"]


def test_populate_keeps_last_report(tmp_path):
    from game_chooser.catalog.model import CatalogModel
    from game_chooser.scanning.coordinator import ScanCoordinator

    model = CatalogModel(_entries("Stale"))
    report = model.populate(ScanCoordinator(tmp_path, None))

    assert model.last_report is report
    assert len(model) == 0
