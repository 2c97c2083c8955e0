"""
Stored architecture files.

The CLI writes ``<base>-arch.json`` (graph) and ``<base>-arch.mmd``
(Mermaid) into one directory; the gateway lists and serves them from there.
Only plain file names inside that directory are accepted.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from archmap.graph.types import Graph
from archmap.shared.exceptions import ArchitectureFileError, ArchitectureFileNotFoundError

logger = logging.getLogger("archmap.service.files")

ARCH_MARKER = "-arch."

CONTENT_TYPES = {
    ".json": "application/json",
    ".mmd": "text/plain",
}

FILE_TYPES = {
    ".json": "json",
    ".mmd": "mermaid",
}


@dataclass
class ArchitectureFile:
    filename: str
    size: int
    modified_at: datetime
    type: str
    module: str = ""

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "size": self.size,
            "modified_at": self.modified_at.isoformat(),
            "type": self.type,
            "module": self.module,
        }


def module_from_filename(filename: str) -> str:
    """``billing-arch.json`` -> ``billing``; empty without the ``-arch.`` marker."""
    if ARCH_MARKER not in filename:
        return ""
    return filename.split(ARCH_MARKER, 1)[0]


def validate_filename(filename: str) -> None:
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise ArchitectureFileError(f"invalid filename: {filename!r}", filename=filename)


def list_architecture_files(directory: Path) -> list[ArchitectureFile]:
    """JSON and Mermaid files in ``directory``, sorted by name."""
    if not directory.is_dir():
        logger.debug("Architecture directory %s does not exist", directory)
        return []

    files = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or entry.suffix not in FILE_TYPES:
            continue
        stat = entry.stat()
        files.append(ArchitectureFile(
            filename=entry.name,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            type=FILE_TYPES[entry.suffix],
            module=module_from_filename(entry.name),
        ))
    return files


def _resolve(directory: Path, filename: str) -> Path:
    validate_filename(filename)
    path = directory / filename
    if path.suffix not in CONTENT_TYPES:
        raise ArchitectureFileError(f"not an architecture file: {filename!r}", filename=filename)
    if not path.is_file():
        raise ArchitectureFileNotFoundError(filename)
    return path


def read_architecture_file(directory: Path, filename: str) -> tuple[bytes, str]:
    """Raw content and content type of one stored file."""
    path = _resolve(directory, filename)
    return path.read_bytes(), CONTENT_TYPES[path.suffix]


def load_architecture_graph(directory: Path, filename: str) -> Graph:
    """Read a stored ``.json`` graph back into a ``Graph``."""
    path = _resolve(directory, filename)
    if path.suffix != ".json":
        raise ArchitectureFileError(f"not a graph file: {filename!r}", filename=filename)
    try:
        return Graph.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, KeyError, TypeError) as e:
        raise ArchitectureFileError(f"{filename} is not a stored graph: {e}", filename=filename) from e
