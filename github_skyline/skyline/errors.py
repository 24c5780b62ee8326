from __future__ import annotations

from pathlib import Path


class SkylineError(Exception):
    """Base class for every error raised while building a skyline."""


class InvalidDateKind(SkylineError, ValueError):
    def __init__(self, key: str, reason: str = "") -> None:
        self.key = key
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid date {key!r}: expected YYYY-MM-DD{detail}")


class EmptyInputError(SkylineError):
    """Raised when there are no buckets to lay out."""


class EmptyModelError(SkylineError):
    """Raised when a skyline has no building with a positive count and empty models are not allowed."""


class WriteError(SkylineError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write {self.path}: {reason}")


class ExternalToolError(SkylineError):
    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class FetchError(SkylineError):
    """Raised when the GitHub API rejects a contributions query."""
