"""Configuration schema for agent-cowork."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ComposeConfig(BaseModel):
    """Defaults for the compose surface."""

    default_cwd: str = ""
    allowed_tools: str = "Read,Edit,Bash"
    require_cwd_on_start: bool = False


class BackendConfig(BaseModel):
    """How to launch the agent backend for the stdio transport."""

    command: str = ""
    cwd: str = ""


class TitleConfig(BaseModel):
    """Session title generation."""

    max_length: int = 40


class AttachmentConfig(BaseModel):
    """File context attachments."""

    max_bytes: int = 1024 * 1024


class Config(BaseSettings):
    """Root configuration for agent-cowork."""

    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    titles: TitleConfig = Field(default_factory=TitleConfig)
    attachments: AttachmentConfig = Field(default_factory=AttachmentConfig)
    data_dir: str = "~/.agent-cowork"

    @property
    def data_path(self) -> Path:
        """Get expanded data directory path."""
        return Path(self.data_dir).expanduser()

    model_config = SettingsConfigDict(
        env_prefix="AGENT_COWORK_",
        env_nested_delimiter="__",
        extra="ignore",
    )
