"""The one error kind raised for malformed content records."""

from __future__ import annotations

from pathlib import Path


class FormatError(ValueError):
    """A record's front matter or filename cannot be parsed."""

    def __init__(self, message: str, *, path: Path | None = None, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line

    def with_path(self, path: Path) -> "FormatError":
        """Return a copy of this error that points at *path*."""
        return FormatError(self.message, path=path, line=self.line)

    def __str__(self) -> str:
        location = ""
        if self.path is not None:
            location = str(self.path)
            if self.line is not None:
                location += f":{self.line}"
            location += ": "
        elif self.line is not None:
            location = f"line {self.line}: "
        return f"{location}{self.message}"
