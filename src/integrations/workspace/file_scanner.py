"""Note scanner: the source of file identifiers tags can be attached to.

Scans the shared folder using glob patterns to find markdown notes.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass
class ScannedFile:
    """Information about a scanned note."""

    path: str
    relative_path: str
    modified_at: datetime
    size_bytes: int


class NoteScanner:
    """Scans a shared folder for markdown notes."""

    DEFAULT_PATTERNS = ["**/*.md"]

    def __init__(self, folder: str | Path):
        """Initialize scanner with the shared folder path.

        Args:
            folder: Path to the shared notes folder
        """
        self.folder = Path(folder)
        if not self.folder.exists():
            raise ValueError(f"Notes folder does not exist: {folder}")
        if not self.folder.is_dir():
            raise ValueError(f"Notes folder is not a directory: {folder}")

    def scan(self, patterns: list[str] | None = None) -> list[ScannedFile]:
        """Scan folder for notes matching patterns.

        Args:
            patterns: List of glob patterns (relative to folder root)

        Returns:
            List of ScannedFile objects, newest first
        """
        files: list[ScannedFile] = []
        seen_paths: set[Path] = set()

        for pattern in patterns or self.DEFAULT_PATTERNS:
            for path in self.folder.glob(pattern):
                # Skip if already seen (patterns may overlap)
                if path in seen_paths:
                    continue

                if not path.is_file() or path.suffix.lower() != ".md":
                    continue

                relative_path = path.relative_to(self.folder)

                # Hidden files and folders (.tags.*.json, .git, .obsidian, ...)
                if any(part.startswith(".") for part in relative_path.parts):
                    continue

                seen_paths.add(path)

                try:
                    stat = path.stat()
                except OSError:
                    # Skip files we can't access
                    continue

                files.append(
                    ScannedFile(
                        path=str(path),
                        relative_path=relative_path.as_posix(),
                        modified_at=datetime.fromtimestamp(stat.st_mtime),
                        size_bytes=stat.st_size,
                    )
                )

        files.sort(key=lambda f: f.modified_at, reverse=True)

        return files

    def list_file_paths(self) -> list[str]:
        """Relative paths of all notes, sorted.

        Примеры:
            ["inbox/todo.md", "notes/a.md", "readme.md"]
        """
        return sorted(f.relative_path for f in self.scan())
