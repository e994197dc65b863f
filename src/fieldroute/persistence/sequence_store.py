"""Stores that record the visiting position of each job."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Hashable, Protocol

from .filesystem import FileStorage

logger = logging.getLogger(__name__)

# Serialises read-modify-write cycles on sequence files within this process.
_file_lock = threading.Lock()


class SequenceStore(Protocol):
    def set_sequence(self, stop_id: Hashable, position: int) -> None:
        """Record ``position`` (1-based) as the visiting order of ``stop_id``."""


class InMemorySequenceStore:
    """Dictionary-backed store, mainly for tests and single-process use."""

    def __init__(self) -> None:
        self.positions: Dict[Hashable, int] = {}

    def set_sequence(self, stop_id: Hashable, position: int) -> None:
        self.positions[stop_id] = position


class FileSequenceStore:
    """Keeps positions in ``<data_root>/sequences.json``.

    Each write reloads the file, updates one entry and atomically replaces the
    file under a process-wide lock, so concurrent optimizations for different
    technicians keep each other's positions.
    """

    def __init__(self, storage: FileStorage | None = None, filename: str = "sequences.json") -> None:
        self.storage = storage or FileStorage()
        self.path: Path = self.storage.root / filename

    def load(self) -> Dict[str, int]:
        return dict(self.storage.read_json(self.path, default={}))

    def set_sequence(self, stop_id: Hashable, position: int) -> None:
        with _file_lock:
            positions = self.load()
            positions[str(stop_id)] = position
            self.storage.replace_json(self.path, positions)
        logger.debug("Stored sequence %d for stop %s", position, stop_id)
