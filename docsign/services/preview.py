"""Transient preview resources for uploaded signature files."""

import tempfile
from pathlib import Path

from docsign.config import settings
from docsign.utils.logger import logger


class PreviewHandle:
    """A previewable copy of an uploaded file, valid until released."""

    def __init__(self, store: "PreviewStore", path: Path):
        self._store = store
        self.path = path
        self.released = False

    @property
    def uri(self) -> str:
        return self.path.as_uri()

    def release(self) -> None:
        self._store.release(self)

    def __enter__(self) -> "PreviewHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class PreviewStore:
    """Acquires and releases preview files under a single directory."""

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory) if directory else settings.get_preview_dir()
        self._live: set[Path] = set()

    @property
    def live_handles(self) -> int:
        return len(self._live)

    def acquire(self, data: bytes, suffix: str = "") -> PreviewHandle:
        """Write data to a fresh preview file and return its handle."""
        self.directory.mkdir(parents=True, exist_ok=True)
        if suffix and not suffix.startswith("."):
            suffix = "." + suffix
        with tempfile.NamedTemporaryFile(
            dir=self.directory, prefix="preview-", suffix=suffix, delete=False
        ) as f:
            f.write(data)
            path = Path(f.name)
        self._live.add(path)
        logger.debug(f"Acquired preview {path.name}")
        return PreviewHandle(self, path)

    def release(self, handle: PreviewHandle) -> None:
        """Delete the preview file; releasing twice is a no-op."""
        if handle.released:
            return
        handle.released = True
        self._live.discard(handle.path)
        handle.path.unlink(missing_ok=True)
        logger.debug(f"Released preview {handle.path.name}")
