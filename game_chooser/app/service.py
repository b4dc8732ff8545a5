"""Catalog service: owns the catalog model, the scan machinery and the active map context."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..catalog.model import CatalogEntry, CatalogModel
from ..config import Config, get_default_maps_dir, get_user_maps_folder
from ..core.descriptor import DescriptorParser, GameDescriptor, XmlDescriptorParser
from ..core.resources import ResourceRoot, open_resource_root, uri_to_source_path, ZIP_URI_SCHEME
from ..scanning.coordinator import ScanCoordinator
from ..scanning.diagnostics import ScanDiagnostics
from ..scanning.recovery import CorruptionRecoveryGate, InteractionExecutor
from .models import CancelToken, ScanReport

logger = logging.getLogger(__name__)

ResourceLoaderFactory = Callable[[Path], ResourceRoot]


class CatalogService:
    """Long-lived front door used by the CLI and the Qt front end.

    Only one map resource context is active at a time; switching closes the previous one.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        interaction: Optional[InteractionExecutor] = None,
        parser: Optional[DescriptorParser] = None,
        diagnostics: Optional[ScanDiagnostics] = None,
        loader_factory: ResourceLoaderFactory = open_resource_root,
    ) -> None:
        self.config = config or Config()
        settings = self.config.model
        self.diagnostics = diagnostics or ScanDiagnostics()
        self.interaction = interaction
        self.parser = parser or XmlDescriptorParser()
        self.recovery_gate = CorruptionRecoveryGate(
            interaction,
            self.diagnostics,
            enabled=settings.recovery.prompt_on_corrupt,
        )
        self.model = CatalogModel()
        self._loader_factory = loader_factory
        self._context: Optional[ResourceRoot] = None
        self._context_lock = threading.Lock()

    def __enter__(self) -> "CatalogService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def create_coordinator(self) -> ScanCoordinator:
        settings = self.config.model
        return ScanCoordinator(
            user_root=get_user_maps_folder(settings),
            default_root=get_default_maps_dir(settings),
            parser=self.parser,
            recovery_gate=self.recovery_gate,
            diagnostics=self.diagnostics,
            max_workers=settings.scanner.max_workers,
            shutdown_timeout=settings.scanner.shutdown_timeout_sec,
            descriptor_folder=settings.scanner.descriptor_folder,
        )

    def refresh(self, cancel_token: Optional[CancelToken] = None) -> ScanReport:
        """Rescan both maps folders and rebuild the catalog.

        Diagnostics from the previous refresh are dropped first.
        """
        self.diagnostics.clear()
        return self.model.populate(self.create_coordinator(), cancel_token)

    def find_by_name(self, name: str) -> Optional[CatalogEntry]:
        return self.model.find_by_name(name)

    def remove(self, entry: CatalogEntry) -> bool:
        return self.model.remove(entry)

    @property
    def resource_context(self) -> Optional[ResourceRoot]:
        return self._context

    def switch_context(self, loader: Optional[ResourceRoot]) -> Optional[ResourceRoot]:
        """Make `loader` the active map context and close the previous one."""
        with self._context_lock:
            previous, self._context = self._context, loader
        if previous is not None and previous is not loader:
            logger.debug("Closing map context %s", previous.path)
            previous.close()
        return loader

    def _map_root_for(self, entry: CatalogEntry) -> Path:
        source = uri_to_source_path(entry.uri)
        if entry.uri.lower().startswith(ZIP_URI_SCHEME):
            return source
        depth = len([part for part in self.config.model.scanner.descriptor_folder.split("/") if part])
        root = source.parent
        for _ in range(depth):
            root = root.parent
        return root

    def open_entry(self, entry: CatalogEntry) -> GameDescriptor:
        """Load the map `entry` belongs to as the active context and parse its descriptor."""
        loader = self._loader_factory(self._map_root_for(entry))
        self.switch_context(loader)
        logger.info("Opened %s from %s", entry.name, loader.path)
        return self.parser.parse(entry.uri)

    def close(self) -> None:
        self.switch_context(None)
        if self.interaction is not None:
            self.interaction.close()
