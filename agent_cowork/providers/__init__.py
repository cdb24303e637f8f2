"""Collaborator abstractions: session titles and file reads."""

from agent_cowork.providers.base import (
    FileData,
    FileReader,
    ReadFileResult,
    TitleGenerationError,
    TitleGenerator,
)
from agent_cowork.providers.local import HeuristicTitleGenerator, LocalFileReader

__all__ = [
    "FileData",
    "FileReader",
    "HeuristicTitleGenerator",
    "LocalFileReader",
    "ReadFileResult",
    "TitleGenerationError",
    "TitleGenerator",
]
