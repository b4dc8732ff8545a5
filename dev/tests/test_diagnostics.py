def test_sink_keeps_newest_reports_up_to_limit():
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    sink = ScanDiagnostics(max_reports=3)
    for i in range(5):
        sink.report(DiagnosticKind.MALFORMED_DESCRIPTOR, f"file:///m{i}.xml", "broken")

    assert [d.source for d in sink.reports] == ["file:///m2.xml", "file:///m3.xml", "file:///m4.xml"]


def test_child_sink_forwards_to_parent_only():
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    seen = []
    parent = ScanDiagnostics(on_report=seen.append)
    first = parent.child()
    second = parent.child()

    first.report(DiagnosticKind.DESCRIPTOR_ERROR, "file:///late.xml", "late failure")

    assert first.has(DiagnosticKind.DESCRIPTOR_ERROR)
    assert second.reports == []
    assert [d.source for d in parent.reports] == ["file:///late.xml"]
    assert [d.source for d in seen] == ["file:///late.xml"]


def test_failing_listener_does_not_lose_report():
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    def explode(entry):
        raise RuntimeError("listener down")

    sink = ScanDiagnostics(on_report=explode)
    sink.report(DiagnosticKind.TIMEOUT, "scan", "gave up")

    assert sink.has(DiagnosticKind.TIMEOUT)


def test_clear_empties_sink():
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    sink = ScanDiagnostics()
    sink.report(DiagnosticKind.CANCELLED, "scan", "stopped")
    sink.clear()

    assert sink.reports == []
