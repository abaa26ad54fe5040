from pathlib import Path
from typing import Protocol

from loguru import logger


class FileSystem(Protocol):
    def list_dir(self, path: Path) -> list[str]:
        """Get the names of the files (not directories) directly inside ``path``."""
        ...

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 text file."""
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Write a UTF-8 text file, replacing any existing content."""
        ...

    def rename(self, source: Path, destination: Path) -> None:
        """Move a file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check whether a file or directory exists."""
        ...

    def mkdir(self, path: Path) -> None:
        """Create a directory and its parents; existing directories are fine."""
        ...


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk. Errors are raised as the OS reports them."""

    def list_dir(self, path: Path) -> list[str]:
        return sorted(entry.name for entry in Path(path).iterdir() if not entry.is_dir())

    def read_text(self, path: Path) -> str:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: Path, content: str) -> None:
        logger.debug(f"Writing {path}")
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def rename(self, source: Path, destination: Path) -> None:
        logger.debug(f"Moving {source} to {destination}")
        Path(source).rename(destination)

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def mkdir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)
