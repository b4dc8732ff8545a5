"""Entry points for building the game catalog from other code."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from ..catalog.model import CatalogModel
from ..config import Config
from ..core.descriptor import DescriptorParser
from ..scanning.coordinator import ScanCoordinator
from ..scanning.diagnostics import ScanDiagnostics
from ..scanning.recovery import CorruptionRecoveryGate, InteractionExecutor
from ..ui.backend_worker import BackendWorkerHandle, spawn_backend_worker
from .models import CancelToken, ScanReport
from .service import CatalogService

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def build_catalog(
    user_root: Optional[PathLike],
    default_root: Optional[PathLike],
    interaction: Optional[InteractionExecutor] = None,
    parser: Optional[DescriptorParser] = None,
    cancel_token: Optional[CancelToken] = None,
    config: Optional[Config] = None,
) -> Tuple[CatalogModel, ScanReport]:
    """Scan two explicit roots once and return the populated catalog with its report."""
    settings = (config or Config()).model
    diagnostics = ScanDiagnostics()
    gate = CorruptionRecoveryGate(interaction, diagnostics, enabled=settings.recovery.prompt_on_corrupt)
    coordinator = ScanCoordinator(
        user_root,
        default_root,
        parser=parser,
        recovery_gate=gate,
        diagnostics=diagnostics,
        max_workers=settings.scanner.max_workers,
        shutdown_timeout=settings.scanner.shutdown_timeout_sec,
        descriptor_folder=settings.scanner.descriptor_folder,
    )
    model = CatalogModel()
    report = model.populate(coordinator, cancel_token)
    return model, report


def start_catalog_scan_async(
    service: CatalogService,
    cancel_token: Optional[CancelToken] = None,
    on_finished: Optional[Callable[[ScanReport], None]] = None,
    on_failed: Optional[Callable[[BaseException], None]] = None,
) -> BackendWorkerHandle:
    """Run `service.refresh` on a background thread and return the started handle."""
    token = cancel_token or CancelToken()
    handle = spawn_backend_worker(service.refresh, token, on_finished=on_finished, on_failed=on_failed)
    handle.start()
    return handle


__all__ = [
    "BackendWorkerHandle",
    "CancelToken",
    "CatalogService",
    "ScanReport",
    "build_catalog",
    "start_catalog_scan_async",
]
