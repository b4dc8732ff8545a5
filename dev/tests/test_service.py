from pathlib import Path

from conftest import descriptor_xml, write_map_dir, write_map_zip


def _config(user_root: Path, default_root: Path, **scanner):
    from game_chooser.config import Config

    return Config({
        "paths": {"user_maps_folder": str(user_root), "default_maps_folder": str(default_root)},
        "scanner": dict(scanner),
    })


def test_refresh_populates_model(map_roots):
    from game_chooser.app.service import CatalogService

    user_root, default_root = map_roots
    write_map_dir(default_root / "classic", {"games/c.xml": descriptor_xml("Classic")})

    with CatalogService(_config(user_root, default_root, max_workers=2)) as service:
        report = service.refresh()
        assert report.clean
        assert service.model.names() == ["Classic"]
        assert service.find_by_name("Classic") is not None
        assert service.remove(service.find_by_name("Classic")) is True
        assert len(service.model) == 0


def test_open_entry_switches_and_closes_previous_context(map_roots):
    from game_chooser.app.service import CatalogService
    from game_chooser.core.resources import DirectoryResourceRoot, ZipResourceRoot

    user_root, default_root = map_roots
    write_map_zip(user_root / "zipped.zip", {"games/z.xml": descriptor_xml("Zipped")})
    write_map_dir(default_root / "loose", {"games/l.xml": descriptor_xml("Loose")})

    service = CatalogService(_config(user_root, default_root))
    try:
        service.refresh()
        descriptor = service.open_entry(service.find_by_name("Zipped"))
        first = service.resource_context
        assert descriptor.name == "Zipped"
        assert isinstance(first, ZipResourceRoot)
        assert first.path == (user_root / "zipped.zip").resolve()

        service.open_entry(service.find_by_name("Loose"))
        second = service.resource_context
        assert isinstance(second, DirectoryResourceRoot)
        assert second.path == (default_root / "loose").resolve()
        assert first.closed is True
        assert second.closed is False
    finally:
        service.close()
    assert second.closed is True
    assert service.resource_context is None


def test_switch_context_to_same_loader_keeps_it_open(tmp_path: Path):
    from game_chooser.app.service import CatalogService
    from game_chooser.core.resources import DirectoryResourceRoot

    service = CatalogService()
    loader = DirectoryResourceRoot(tmp_path)
    service.switch_context(loader)
    service.switch_context(loader)

    assert loader.closed is False
    service.close()
    assert loader.closed is True


def test_prompt_can_be_disabled_by_config(map_roots):
    from game_chooser.app.service import CatalogService
    from game_chooser.config import Config

    user_root, default_root = map_roots
    config = _config(user_root, default_root)
    config.set_in("recovery", "prompt_on_corrupt", False)

    class FailingExecutor:
        def present_and_await(self, request):
            raise AssertionError("must not ask")

        def close(self):
            pass

    service = CatalogService(config, interaction=FailingExecutor())
    assert service.recovery_gate.enabled is False


def test_build_catalog_and_async_scan(map_roots):
    from game_chooser.app.api import CancelToken, CatalogService, build_catalog, start_catalog_scan_async

    user_root, default_root = map_roots
    write_map_dir(user_root / "a", {"games/a.xml": descriptor_xml("Async")})

    model, report = build_catalog(user_root, default_root)
    assert model.names() == ["Async"]
    assert report.total_sources == 1

    finished = []
    with CatalogService(_config(user_root, default_root)) as service:
        handle = start_catalog_scan_async(service, CancelToken(), on_finished=finished.append)
        assert handle.join(timeout=10) is True
    assert handle.error is None
    assert finished and finished[0] is handle.result
    assert [e.name for e in handle.result.entries] == ["Async"]


def test_async_scan_reports_failure():
    from game_chooser.ui.backend_worker import spawn_backend_worker

    failures = []

    def boom(token):
        raise RuntimeError("scan blew up")

    handle = spawn_backend_worker(boom, None, on_failed=failures.append)
    assert handle.start() is True
    handle.join(timeout=5)

    assert isinstance(handle.error, RuntimeError)
    assert failures == [handle.error]
    assert handle.cancel() is False


def test_repeated_refresh_keeps_only_latest_diagnostics(map_roots):
    from game_chooser.app.service import CatalogService
    from game_chooser.scanning.diagnostics import DiagnosticKind

    user_root, default_root = map_roots
    write_map_dir(user_root / "broken", {"games/bad.xml": "<game><info name='x'>"})

    with CatalogService(_config(user_root, default_root)) as service:
        for _ in range(5):
            report = service.refresh()
            assert [d.kind for d in report.diagnostics] == [DiagnosticKind.MALFORMED_DESCRIPTOR]

        assert len(service.diagnostics.reports) == 1
