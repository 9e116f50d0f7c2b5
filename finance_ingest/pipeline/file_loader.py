from pathlib import Path

from finance_ingest.pipeline.exceptions import FileReadError


class FileLoader:
    """Reads document bytes from the local filesystem."""

    def load(self, path: Path) -> bytes:
        """Read file bytes.

        Raises:
            FileReadError: if the file is missing or unreadable.
        """
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Failed to read {path}: {exc}") from exc
