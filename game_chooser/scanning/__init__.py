#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""Game Chooser scanning package.

Primary entry point: ScanCoordinator.
"""

from .coordinator import EntryAccumulator, ScanCoordinator, resolve_worker_count
from .diagnostics import DiagnosticKind, DiagnosticReport, ScanDiagnostics
from .recovery import (
    CorruptionRecoveryGate,
    InteractionChannel,
    InteractionRequest,
    RecoveryOutcome,
    SerialInteractionExecutor,
)
from .sources import GameSource, SourceKind, SourcePriority, enumerate_sources

__all__ = [
    "CorruptionRecoveryGate",
    "DiagnosticKind",
    "DiagnosticReport",
    "EntryAccumulator",
    "GameSource",
    "InteractionChannel",
    "InteractionRequest",
    "RecoveryOutcome",
    "ScanCoordinator",
    "ScanDiagnostics",
    "SerialInteractionExecutor",
    "SourceKind",
    "SourcePriority",
    "enumerate_sources",
    "resolve_worker_count",
]
