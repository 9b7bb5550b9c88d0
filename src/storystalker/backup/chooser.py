# ABOUTME: File-selection capability used to pick backup destinations and sources.
# ABOUTME: Choosers return a path, or None when the user cancels.

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileChooser(Protocol):
    """Protocol for asking the user where to save or what to open."""

    def choose_save_path(self, suggested_name: str, extension: str) -> Path | None: ...

    def choose_open_path(self, extension: str) -> Path | None: ...


class FixedPathChooser:
    """Chooser that always answers with a path decided up front (or cancels if None)."""

    def __init__(self, path: Path | None) -> None:
        self._path = path

    def choose_save_path(self, suggested_name: str, extension: str) -> Path | None:
        return self._path

    def choose_open_path(self, extension: str) -> Path | None:
        return self._path
