"""Atomic writes for the debug report produced by ``ProgressLog``."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

import structlog


logger = structlog.get_logger()


@dataclass(frozen=True)
class WrittenFile:
    """Where a debug report landed, with its size and checksum."""

    path: str
    absolute_path: str
    bytes_written: int
    sha256: str


class AtomicWriter:
    """Writes the debug report through a temporary sibling and a rename."""

    def __init__(self, base_dir: Path, batch_id: str | None = None) -> None:
        self._base_dir = base_dir
        self._log = logger.bind(component="atomic_writer")
        if batch_id:
            self._log = self._log.bind(batch_id=batch_id)

    def write(self, path: Path, content: str) -> WrittenFile:
        """Write ``content`` as UTF-8 to ``path``, replacing any previous report."""
        content_bytes = content.encode("utf-8")
        sha256 = hashlib.sha256(content_bytes).hexdigest()

        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        temp_path.write_bytes(content_bytes)
        temp_path.replace(path)

        try:
            relative_path = str(path.relative_to(self._base_dir))
        except ValueError:
            relative_path = str(path)

        self._log.debug(
            "file_written",
            path=relative_path,
            bytes=len(content_bytes),
            sha256=sha256[:12],
        )

        return WrittenFile(
            path=relative_path,
            absolute_path=str(path.resolve()),
            bytes_written=len(content_bytes),
            sha256=sha256,
        )
