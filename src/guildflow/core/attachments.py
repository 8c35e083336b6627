# src/guildflow/core/attachments.py
"""Filesystem attachment store.

Message blocks reference attachments by a path relative to a base
directory. Reads are confined to that directory.
"""

from pathlib import Path

__all__ = ["FilesystemAttachmentStore"]


class FilesystemAttachmentStore:
    """Reads attachment bytes from under a base directory."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    def _resolve(self, file_path: str) -> Path:
        """Resolve a relative attachment path.

        Raises:
            ValueError: If the path is absolute or escapes base_path
        """
        if Path(file_path).is_absolute():
            raise ValueError(f"Attachment path must be relative: {file_path!r}")
        resolved = (self.base_path / file_path).resolve()
        base_resolved = self.base_path.resolve()
        if not resolved.is_relative_to(base_resolved):
            raise ValueError(f"Attachment path escapes {base_resolved}: {file_path!r}")
        return resolved

    def read(self, file_path: str) -> bytes:
        """Read an attachment.

        Raises:
            ValueError: If the path is not contained in base_path
            FileNotFoundError: If the file does not exist
        """
        return self._resolve(file_path).read_bytes()

    def write(self, file_path: str, content: bytes) -> None:
        """Store an attachment, creating intermediate directories."""
        path = self._resolve(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
