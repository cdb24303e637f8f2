"""Interfaces of the external collaborators the compose core depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class TitleGenerationError(RuntimeError):
    """Raised when a session title cannot be produced."""


@dataclass(frozen=True)
class FileData:
    """Content of one file read for prompt context."""

    name: str
    content: str
    path: str


@dataclass(frozen=True)
class ReadFileResult:
    """Outcome of a file read; exactly one of data / error is meaningful."""

    success: bool
    data: FileData | None = None
    error: str | None = None

    @classmethod
    def ok(cls, name: str, content: str, path: str) -> "ReadFileResult":
        return cls(success=True, data=FileData(name=name, content=content, path=path))

    @classmethod
    def fail(cls, error: str) -> "ReadFileResult":
        return cls(success=False, error=error)


class TitleGenerator(ABC):
    """Produces a session title from the raw prompt text."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate a title for a new session.

        Args:
            prompt: The prompt the session will start with, untrimmed.

        Returns:
            A short title.

        Raises:
            TitleGenerationError: No title could be produced.
        """


class FileReader(ABC):
    """Reads file content out-of-band for the attachment pipeline."""

    @abstractmethod
    async def read(self, path: str) -> ReadFileResult:
        """Read one file. Expected failures are returned, not raised."""
